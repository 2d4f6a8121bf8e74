"""Router factory for plain tenant-scoped collections.

Each collection gets list/create/read/update/delete under
``/api/gym/{gym_id}/<path>``, plus ``PUT /{item_id}/status`` when it has a
lifecycle. All queries go through the tenant scope; ``gym_id`` is never taken
from the request body.
"""
from typing import Any, Callable, Dict, List, Optional, Type

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from gymcore.database import get_db
from gymcore.errors import ValidationError
from gymcore.lifecycle import Lifecycle
from gymcore.schemas import StatusChange
from gymcore.tenancy import TenantScope, get_scoped_or_404, get_tenant_scope, scoped_query

# (db, scope, incoming field values, existing row or None) -> values to write
Prepare = Callable[[Session, TenantScope, Dict[str, Any], Optional[Any]], Dict[str, Any]]
OnTransition = Callable[[Any, str, str], None]


def reject_null_required(model: Type[Any], data: Dict[str, Any]) -> None:
    """Raise when an update explicitly nulls a column that must hold a value."""
    columns = model.__table__.columns
    for key, value in data.items():
        column = columns.get(key)
        if value is None and column is not None and not column.nullable:
            raise ValidationError(f"{to_camel(key)} cannot be null")


def tenant_crud_router(
    *,
    path: str,
    model: Type[Any],
    label: str,
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    read_schema: Type[BaseModel],
    order_by: Any = None,
    prepare: Optional[Prepare] = None,
    lifecycle: Optional[Lifecycle] = None,
    on_transition: Optional[OnTransition] = None,
) -> APIRouter:
    router = APIRouter(prefix=f"/api/gym/{{gym_id}}/{path}", tags=[path])

    def _load(db: Session, scope: TenantScope, item_id: int) -> Any:
        return get_scoped_or_404(db, model, scope, item_id, label)

    @router.get("", response_model=List[read_schema])
    def list_items(scope: TenantScope = Depends(get_tenant_scope), db: Session = Depends(get_db)) -> List[Any]:
        query = scoped_query(db, model, scope)
        if order_by is not None:
            query = query.order_by(order_by)
        return query.all()

    @router.post("", response_model=read_schema, status_code=status.HTTP_201_CREATED)
    def create_item(
        payload: create_schema,
        scope: TenantScope = Depends(get_tenant_scope),
        db: Session = Depends(get_db),
    ) -> Any:
        data = payload.model_dump(exclude_none=True)
        if prepare is not None:
            data = prepare(db, scope, data, None)
        item = model(gym_id=scope.gym_id, **data)
        if lifecycle is not None:
            item.status = lifecycle.initial
        db.add(item)
        db.commit()
        db.refresh(item)
        return item

    @router.get("/{item_id}", response_model=read_schema)
    def get_item(item_id: int, scope: TenantScope = Depends(get_tenant_scope), db: Session = Depends(get_db)) -> Any:
        return _load(db, scope, item_id)

    @router.put("/{item_id}", response_model=read_schema)
    def update_item(
        item_id: int,
        payload: update_schema,
        scope: TenantScope = Depends(get_tenant_scope),
        db: Session = Depends(get_db),
    ) -> Any:
        item = _load(db, scope, item_id)
        data = payload.model_dump(exclude_unset=True)
        reject_null_required(model, data)
        if prepare is not None:
            data = prepare(db, scope, data, item)
        for key, value in data.items():
            setattr(item, key, value)
        db.commit()
        db.refresh(item)
        return item

    @router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_item(item_id: int, scope: TenantScope = Depends(get_tenant_scope), db: Session = Depends(get_db)) -> None:
        item = _load(db, scope, item_id)
        db.delete(item)
        db.commit()

    if lifecycle is not None:

        @router.put("/{item_id}/status", response_model=read_schema)
        def change_status(
            item_id: int,
            change: StatusChange,
            scope: TenantScope = Depends(get_tenant_scope),
            db: Session = Depends(get_db),
        ) -> Any:
            item = _load(db, scope, item_id)
            previous = lifecycle.advance(item, change.status)
            if on_transition is not None:
                on_transition(item, previous, change.status)
            db.commit()
            db.refresh(item)
            return item

    return router
