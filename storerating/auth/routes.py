from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from storerating.auth.deps import get_db, get_token_service, require_roles
from storerating.schemas.auth import RegisterIn, LoginIn, LoginOut, UserEnvelope
from storerating.auth.service import register_user, login_user, current_user
from storerating.utils.security import Identity, TokenService

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
def register(body: RegisterIn, db: Session = Depends(get_db)):
    user = register_user(db, body.name, body.email, body.password, body.address)
    return {"message": "User registered successfully", "user": user}

@router.post("/login", response_model=LoginOut)
def login(body: LoginIn, db: Session = Depends(get_db), tokens: TokenService = Depends(get_token_service)):
    token, user = login_user(db, tokens, body.email, body.password)
    return {"token": token, "user": user}

@router.get("/me", response_model=UserEnvelope)
def me(db: Session = Depends(get_db), identity: Identity = Depends(require_roles())):
    return {"user": current_user(db, identity)}
