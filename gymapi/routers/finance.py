"""Expenses, staff and payroll, retail products, deposits and revenue."""
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from gymcore import lifecycle
from gymcore.database import get_db
from gymcore.errors import ValidationError
from gymcore.models import Deposit, Expense, PayrollRecord, Product, Revenue, Staff
from gymcore.payroll import compute_pay
from gymcore.schemas import (
    DepositCreate,
    DepositRead,
    DepositUpdate,
    ExpenseCreate,
    ExpenseRead,
    ExpenseUpdate,
    PayrollCreate,
    PayrollRead,
    PayrollUpdate,
    ProductCreate,
    ProductRead,
    ProductSale,
    ProductUpdate,
    RevenueCreate,
    RevenueRead,
    StaffCreate,
    StaffRead,
    StaffUpdate,
)
from gymcore.tenancy import TenantScope, ensure_member, ensure_staff, get_scoped_or_404, get_tenant_scope, scoped_query

from ..crud import tenant_crud_router

expenses_router = tenant_crud_router(
    path="expenses",
    model=Expense,
    label="Expense",
    create_schema=ExpenseCreate,
    update_schema=ExpenseUpdate,
    read_schema=ExpenseRead,
    order_by=Expense.date.desc(),
)


# --- staff and payroll ----------------------------------------------------


def _check_staff(db: Session, scope: TenantScope, data: Dict[str, Any], staff: Optional[Staff]) -> Dict[str, Any]:
    if data.get("email"):
        data["email"] = data["email"].lower()
    pay_type = data.get("pay_type") or (staff.pay_type if staff is not None else "hourly")
    salary = data["salary"] if "salary" in data else (staff.salary if staff is not None else None)
    if pay_type == "salary" and salary is None:
        raise ValidationError("Salaried staff need a salary")
    return data


staff_router = tenant_crud_router(
    path="staff",
    model=Staff,
    label="Staff member",
    create_schema=StaffCreate,
    update_schema=StaffUpdate,
    read_schema=StaffRead,
    order_by=Staff.name,
    prepare=_check_staff,
)


def _price_payroll(
    db: Session, scope: TenantScope, data: Dict[str, Any], record: Optional[PayrollRecord]
) -> Dict[str, Any]:
    if record is not None and record.status != "draft":
        raise ValidationError("Only draft payroll records can be edited")
    staff = ensure_staff(db, scope, data["staff_id"] if record is None else record.staff_id)
    hours = data.get("hours_worked")
    deductions = data.get("deductions")
    pay = compute_pay(
        staff.pay_type,
        staff.hourly_rate,
        staff.salary,
        hours if hours is not None else (record.hours_worked if record is not None else 0),
        deductions if deductions is not None else (record.deductions if record is not None else 0),
    )
    data.update(pay)
    return data


def _payroll_transition(record: PayrollRecord, previous: str, target: str) -> None:
    record.pay_date = date.today() if target == "paid" else None


payroll_router = tenant_crud_router(
    path="payroll",
    model=PayrollRecord,
    label="Payroll record",
    create_schema=PayrollCreate,
    update_schema=PayrollUpdate,
    read_schema=PayrollRead,
    order_by=PayrollRecord.pay_period_start.desc(),
    prepare=_price_payroll,
    lifecycle=lifecycle.PAYROLL,
    on_transition=_payroll_transition,
)


# --- products -------------------------------------------------------------

products_router = tenant_crud_router(
    path="products",
    model=Product,
    label="Product",
    create_schema=ProductCreate,
    update_schema=ProductUpdate,
    read_schema=ProductRead,
    order_by=Product.name,
)

sales_router = APIRouter(prefix="/api/gym/{gym_id}/products", tags=["products"])


@sales_router.post("/{product_id}/sell", response_model=ProductRead)
def sell_product(
    product_id: int,
    sale: ProductSale,
    scope: TenantScope = Depends(get_tenant_scope),
    db: Session = Depends(get_db),
) -> Product:
    product = get_scoped_or_404(db, Product, scope, product_id, "Product")
    if not product.is_active:
        raise ValidationError("Product is not for sale")
    if product.stock < sale.quantity:
        raise ValidationError(f"Insufficient stock: {product.stock} left")
    product.stock -= sale.quantity
    product.sold += sale.quantity
    db.add(
        Revenue(
            gym_id=scope.gym_id,
            amount=Decimal(str(product.price)) * sale.quantity,
            source="product_sale",
        )
    )
    db.commit()
    db.refresh(product)
    return product


# --- deposits -------------------------------------------------------------


def _check_deposit(db: Session, scope: TenantScope, data: Dict[str, Any], deposit: Optional[Deposit]) -> Dict[str, Any]:
    if deposit is None:
        ensure_member(db, scope, data["member_id"])
    elif deposit.status != "active":
        raise ValidationError("Only active deposits can be edited")
    return data


def _deposit_transition(deposit: Deposit, previous: str, target: str) -> None:
    if target == "refunded":
        deposit.refund_date = date.today()


deposits_router = tenant_crud_router(
    path="deposits",
    model=Deposit,
    label="Deposit",
    create_schema=DepositCreate,
    update_schema=DepositUpdate,
    read_schema=DepositRead,
    order_by=Deposit.deposit_date.desc(),
    prepare=_check_deposit,
    lifecycle=lifecycle.DEPOSIT,
    on_transition=_deposit_transition,
)


# --- revenue --------------------------------------------------------------

revenue_router = APIRouter(prefix="/api/gym/{gym_id}/revenue", tags=["revenue"])


@revenue_router.get("", response_model=List[RevenueRead])
def list_revenue(scope: TenantScope = Depends(get_tenant_scope), db: Session = Depends(get_db)) -> List[Revenue]:
    return scoped_query(db, Revenue, scope).order_by(Revenue.date.desc(), Revenue.id.desc()).all()


@revenue_router.post("", response_model=RevenueRead, status_code=status.HTTP_201_CREATED)
def record_revenue(
    revenue_in: RevenueCreate,
    scope: TenantScope = Depends(get_tenant_scope),
    db: Session = Depends(get_db),
) -> Revenue:
    revenue = Revenue(gym_id=scope.gym_id, **revenue_in.model_dump())
    db.add(revenue)
    db.commit()
    db.refresh(revenue)
    return revenue


routers = [
    expenses_router,
    staff_router,
    payroll_router,
    products_router,
    sales_router,
    deposits_router,
    revenue_router,
]
