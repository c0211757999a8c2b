from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from storerating.auth.deps import get_db, require_roles
from storerating.models.user import UserRole
from storerating.schemas.auth import UserEnvelope
from storerating.schemas.store import MessageOut
from storerating.schemas.user import UserOut, UserDetailOut, UserCreate, UserUpdate, DashboardStats
from storerating.users import service

router = APIRouter(
    prefix="/users",
    tags=["users"],
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)

@router.get("/dashboard/stats", response_model=DashboardStats)
def dashboard_stats(db: Session = Depends(get_db)):
    return service.dashboard_stats(db)

@router.get("", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db)):
    return service.list_users(db)

@router.get("/{user_id}", response_model=UserDetailOut)
def get_user(user_id: int, db: Session = Depends(get_db)):
    return service.get_user(db, user_id)

@router.post("", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
def create_user(body: UserCreate, db: Session = Depends(get_db)):
    user = service.create_user(db, body.name, body.email, body.password, body.address, body.role)
    return {"message": "User created successfully", "user": user}

@router.put("/{user_id}", response_model=UserEnvelope)
def update_user(user_id: int, body: UserUpdate, db: Session = Depends(get_db)):
    user = service.update_user(db, user_id, body.name, body.email, body.address, body.role)
    return {"message": "User updated successfully", "user": user}

@router.delete("/{user_id}", response_model=MessageOut)
def delete_user(user_id: int, db: Session = Depends(get_db)):
    service.delete_user(db, user_id)
    return {"message": "User deleted successfully"}
