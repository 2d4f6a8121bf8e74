"""Public gym directory and membership requests. No authentication; active gyms and public fields only."""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from gymcore import lifecycle
from gymcore.config import get_settings
from gymcore.database import get_db
from gymcore.errors import Conflict, NotFound
from gymcore.models import Gym, Member
from gymcore.rate_limit import limiter
from gymcore.schemas import MarketplaceGym, MembershipRequest, MembershipRequestReceipt

from ..caches import invalidate_platform_stats, marketplace_cache

settings = get_settings()
router = APIRouter(prefix="/api/marketplace", tags=["marketplace"])

LISTING_KEY = "gyms"


def _listing(db: Session) -> List[Dict[str, Any]]:
    gyms = db.query(Gym).filter(Gym.is_active.is_(True)).order_by(Gym.name).all()
    return [MarketplaceGym.model_validate(gym).model_dump() for gym in gyms]


def _matches(entry: Dict[str, Any], city: Optional[str], category: Optional[str], search: Optional[str]) -> bool:
    if city and (entry["city"] or "").lower() != city.lower():
        return False
    if category and (entry["category"] or "").lower() != category.lower():
        return False
    if search:
        needle = search.lower()
        haystack = " ".join([entry["name"], entry["location"] or "", entry["description"] or ""]).lower()
        return needle in haystack
    return True


@router.get("/gyms", response_model=List[MarketplaceGym])
def list_public_gyms(
    city: Optional[str] = Query(None, max_length=100),
    category: Optional[str] = Query(None, max_length=50),
    search: Optional[str] = Query(None, max_length=100),
    db: Session = Depends(get_db),
) -> List[Dict[str, Any]]:
    listing = marketplace_cache.get_or_compute(LISTING_KEY, lambda: _listing(db))
    return [entry for entry in listing if _matches(entry, city, category, search)]


@router.get("/gyms/{code}", response_model=MarketplaceGym)
def get_public_gym(code: str, db: Session = Depends(get_db)) -> Dict[str, Any]:
    listing = marketplace_cache.get_or_compute(LISTING_KEY, lambda: _listing(db))
    for entry in listing:
        if entry["code"] == code:
            return entry
    raise NotFound("Gym not found")


@router.post("/gyms/{code}/requests", response_model=MembershipRequestReceipt, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.request_rate_limit)
def request_membership(
    request: Request,
    code: str,
    request_in: MembershipRequest,
    db: Session = Depends(get_db),
) -> MembershipRequestReceipt:
    """Queue a visitor's request to join a gym; the gym approves or rejects it from its members list."""
    gym = db.query(Gym).filter(Gym.code == code, Gym.is_active.is_(True)).first()
    if gym is None:
        raise NotFound("Gym not found")
    email = request_in.email.lower()
    if db.query(Member.id).filter(Member.gym_id == gym.id, Member.email == email).first():
        raise Conflict("A membership request for this email already exists")
    db.add(
        Member(
            gym_id=gym.id,
            status=lifecycle.MEMBER.initial,
            **request_in.model_dump(exclude={"email"}, exclude_none=True),
            email=email,
        )
    )
    db.commit()
    invalidate_platform_stats()
    return MembershipRequestReceipt(
        gym_name=gym.name,
        status=lifecycle.MEMBER.initial,
        message="Request sent. The gym will review it shortly.",
    )


routers = [router]
