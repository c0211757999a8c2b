from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from loguru import logger
from storerating.errors import DuplicateEmail, NotFound, is_unique_violation
from storerating.models.user import User, UserRole
from storerating.models.store import Store
from storerating.models.rating import Rating
from storerating.stores.service import list_owned_stores
from storerating.utils.security import hash_password
from storerating.utils.emails import normalize_email

DUPLICATE_USER_MESSAGE = "User already exists"


def _email_taken(db: Session, email: str, exclude_id: int | None = None) -> bool:
    q = db.query(User.id).filter(User.email == normalize_email(email))
    if exclude_id is not None:
        q = q.filter(User.id != exclude_id)
    return q.first() is not None

def _commit(db: Session):
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if is_unique_violation(exc, "uq_users_email", "users.email"):
            logger.warning("users.email unique constraint hit after pre-check passed")
            raise DuplicateEmail(DUPLICATE_USER_MESSAGE) from exc
        raise

def _get_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()

def get_user(db: Session, user_id: int) -> dict:
    """Return the user as a dict; store owners also get their stores with aggregates."""
    user = _get_or_404(db, user_id)
    detail = {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "address": user.address,
        "role": user.role,
        "created_at": user.created_at,
    }
    if user.role is UserRole.STORE_OWNER:
        detail["stores"] = list_owned_stores(db, user.id)
    return detail

def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).first()

def create_user(
    db: Session,
    name: str,
    email: str,
    password: str,
    address: str | None = None,
    role: UserRole = UserRole.USER,
) -> User:
    email = normalize_email(email)
    if _email_taken(db, email):
        raise DuplicateEmail(DUPLICATE_USER_MESSAGE)
    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        address=address,
        role=UserRole(role),
    )
    db.add(user)
    _commit(db)
    db.refresh(user)
    logger.info(f"user {user.id} created with role {user.role.value}")
    return user

def update_user(
    db: Session,
    user_id: int,
    name: str,
    email: str,
    address: str | None,
    role: UserRole,
) -> User:
    user = _get_or_404(db, user_id)
    email = normalize_email(email)
    if _email_taken(db, email, exclude_id=user.id):
        raise DuplicateEmail(DUPLICATE_USER_MESSAGE)
    user.name = name
    user.email = email
    user.address = address
    user.role = UserRole(role)
    _commit(db)
    db.refresh(user)
    logger.info(f"user {user.id} updated")
    return user

def delete_user(db: Session, user_id: int):
    user = _get_or_404(db, user_id)
    db.delete(user)
    db.commit()
    logger.info(f"user {user_id} deleted")

def dashboard_stats(db: Session) -> dict:
    def count_role(role: UserRole) -> int:
        return db.query(func.count(User.id)).filter(User.role == role).scalar()

    return {
        "total_users": db.query(func.count(User.id)).scalar(),
        "total_stores": db.query(func.count(Store.id)).scalar(),
        "total_ratings": db.query(func.count(Rating.id)).scalar(),
        "total_admins": count_role(UserRole.ADMIN),
        "total_store_owners": count_role(UserRole.STORE_OWNER),
        "total_normal_users": count_role(UserRole.USER),
    }

def ensure_admin(db: Session, name: str, email: str, password: str) -> User:
    existing = get_user_by_email(db, email)
    if existing is not None:
        return existing
    logger.info(f"bootstrapping admin account {email}")
    return create_user(db, name, email, password, role=UserRole.ADMIN)
