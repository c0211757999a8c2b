from sqlalchemy.orm import Session
from storerating.errors import Unauthenticated
from storerating.models.user import User, UserRole
from storerating.users.service import create_user, get_user_by_email
from storerating.utils.security import Identity, TokenService, verify_password

def register_user(db: Session, name: str, email: str, password: str, address: str | None = None) -> User:
    return create_user(db, name, email, password, address=address, role=UserRole.USER)

def login_user(db: Session, tokens: TokenService, email: str, password: str) -> tuple[str, User]:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        raise Unauthenticated("Invalid credentials")
    return tokens.issue(user.id, user.role), user

def current_user(db: Session, identity: Identity) -> User:
    user = db.get(User, identity.user_id)
    if user is None:
        raise Unauthenticated("User not found")
    return user
