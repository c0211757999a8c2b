from sqlalchemy import func, true
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from loguru import logger
from storerating.errors import DuplicateEmail, NotFound, Unauthenticated, is_unique_violation
from storerating.models.store import Store
from storerating.models.user import User
from storerating.models.rating import Rating
from storerating.utils.emails import normalize_email

DUPLICATE_STORE_MESSAGE = "Store with this email already exists"
NOT_FOUND_OR_UNAUTHORIZED = "Store not found or unauthorized"


def _aggregate_query(db: Session):
    average = func.coalesce(func.avg(Rating.rating), 0).label("average_rating")
    total = func.count(Rating.id).label("total_ratings")
    return (
        db.query(Store, average, total)
          .outerjoin(Rating, Rating.store_id == Store.id)
          .group_by(Store.id)
    )

def _to_aggregate(store: Store, average, total) -> dict:
    return {
        "id": store.id,
        "name": store.name,
        "email": store.email,
        "address": store.address,
        "owner_id": store.owner_id,
        "created_at": store.created_at,
        # AVG comes back as Decimal on some backends
        "average_rating": float(average or 0),
        "total_ratings": int(total or 0),
    }

def _email_taken(db: Session, email: str, exclude_id: int | None = None) -> bool:
    q = db.query(Store.id).filter(Store.email == normalize_email(email))
    if exclude_id is not None:
        q = q.filter(Store.id != exclude_id)
    return q.first() is not None

def _commit(db: Session):
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if is_unique_violation(exc, "uq_stores_email", "stores.email"):
            logger.warning("stores.email unique constraint hit after pre-check passed")
            raise DuplicateEmail(DUPLICATE_STORE_MESSAGE) from exc
        raise

def get_caller(db: Session, user_id: int) -> User:
    # a valid token may outlive the account it was issued for
    user = db.get(User, user_id)
    if user is None:
        raise Unauthenticated("User not found")
    return user

def _get_owned_or_404(db: Session, store_id: int, caller_id: int, is_admin: bool) -> Store:
    # a store the caller may not touch looks exactly like a missing one
    owned = true() if is_admin else Store.owner_id == caller_id
    store = db.query(Store).filter(Store.id == store_id, owned).first()
    if store is None:
        raise NotFound(NOT_FOUND_OR_UNAUTHORIZED)
    return store


def list_stores(db: Session) -> list[dict]:
    rows = _aggregate_query(db).order_by(Store.id).all()
    return [_to_aggregate(*row) for row in rows]

def list_owned_stores(db: Session, owner_id: int) -> list[dict]:
    rows = _aggregate_query(db).filter(Store.owner_id == owner_id).order_by(Store.id).all()
    return [_to_aggregate(*row) for row in rows]

def get_store(db: Session, store_id: int, caller_id: int | None = None) -> dict:
    row = _aggregate_query(db).filter(Store.id == store_id).first()
    if row is None:
        raise NotFound("Store not found")
    store = _to_aggregate(*row)

    store["user_rating"] = None
    if caller_id is not None:
        store["user_rating"] = (
            db.query(Rating.rating)
              .filter(Rating.user_id == caller_id, Rating.store_id == store_id)
              .scalar()
        )
    return store

def create_store(db: Session, name: str, email: str, address: str | None, owner_id: int) -> Store:
    get_caller(db, owner_id)
    email = normalize_email(email)
    if _email_taken(db, email):
        raise DuplicateEmail(DUPLICATE_STORE_MESSAGE)
    store = Store(name=name, email=email, address=address, owner_id=owner_id)
    db.add(store)
    _commit(db)
    db.refresh(store)
    logger.info(f"store {store.id} created by user {owner_id}")
    return store

def update_store(
    db: Session,
    store_id: int,
    caller_id: int,
    is_admin: bool,
    name: str,
    email: str,
    address: str | None,
) -> Store:
    email = normalize_email(email)
    store = _get_owned_or_404(db, store_id, caller_id, is_admin)
    if _email_taken(db, email, exclude_id=store.id):
        raise DuplicateEmail(DUPLICATE_STORE_MESSAGE)
    store.name = name
    store.email = email
    store.address = address
    _commit(db)
    db.refresh(store)
    logger.info(f"store {store.id} updated by user {caller_id}")
    return store

def delete_store(db: Session, store_id: int, caller_id: int, is_admin: bool):
    store = _get_owned_or_404(db, store_id, caller_id, is_admin)
    db.delete(store)
    db.commit()
    logger.info(f"store {store_id} deleted by user {caller_id}")
