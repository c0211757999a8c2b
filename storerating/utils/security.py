from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from passlib.context import CryptContext
from jose import jwt, JWTError
from storerating.errors import InvalidToken
from storerating.models.user import UserRole

ALGORITHM = "HS256"

pwd_context = CryptContext(
    schemes=["bcrypt_sha256", "bcrypt"],
    deprecated="auto",
    bcrypt_sha256__rounds=10,
    bcrypt__rounds=10,
)

def configure_hashing(rounds: int):
    pwd_context.update(bcrypt_sha256__rounds=rounds, bcrypt__rounds=rounds)

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(password: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(password, hashed)
    except ValueError:
        # unknown or malformed hash format
        return False


@dataclass(frozen=True)
class Identity:
    user_id: int
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN


class TokenService:
    """Issues and verifies the signed bearer tokens carrying user id and role."""

    def __init__(self, secret_key: str, expire_minutes: int):
        self._secret_key = secret_key
        self.expire_minutes = expire_minutes

    def issue(self, user_id: int, role: UserRole, expires_minutes: int | None = None) -> str:
        minutes = self.expire_minutes if expires_minutes is None else expires_minutes
        expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
        to_encode = {"sub": str(user_id), "role": UserRole(role).value, "exp": expire}
        return jwt.encode(to_encode, self._secret_key, algorithm=ALGORITHM)

    def verify(self, token: str) -> Identity:
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[ALGORITHM])
        except JWTError as exc:
            raise InvalidToken() from exc

        sub = payload.get("sub")
        role = payload.get("role")
        if sub is None or role is None:
            raise InvalidToken("Invalid token payload")
        try:
            return Identity(user_id=int(sub), role=UserRole(role))
        except ValueError as exc:
            raise InvalidToken("Invalid token payload") from exc
