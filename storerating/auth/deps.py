from fastapi import Request, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from storerating.errors import Unauthenticated, Forbidden, InvalidToken
from storerating.models.user import UserRole
from storerating.utils.security import Identity, TokenService

bearer_scheme = HTTPBearer(auto_error=False)


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()

def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens

def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> Identity:
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Not authenticated")
    try:
        return tokens.verify(credentials.credentials)
    except InvalidToken as exc:
        raise Unauthenticated(exc.message) from exc

def get_optional_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> Identity | None:
    if credentials is None or not credentials.credentials:
        return None
    try:
        return tokens.verify(credentials.credentials)
    except InvalidToken:
        # public routes treat a bad token like no token
        return None

def require_roles(*roles: UserRole):
    """
    Build a dependency that admits only the given roles.

    With no roles any authenticated caller passes. The resolved identity is
    returned to the endpoint.

    Usage:
        @router.post("")
        def create(identity: Identity = Depends(require_roles(UserRole.ADMIN))):
            ...
    """
    allowed = frozenset(roles)

    def role_checker(identity: Identity = Depends(get_current_identity)) -> Identity:
        if allowed and identity.role not in allowed:
            raise Forbidden(f"Role '{identity.role.value}' is not allowed to access this resource")
        return identity

    return role_checker
