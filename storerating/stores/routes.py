from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from storerating.auth.deps import get_db, get_optional_identity, require_roles
from storerating.models.user import UserRole
from storerating.schemas.store import (
    StoreIn, StoreAggregateOut, StoreDetailOut, StoreEnvelope, RatingIn, MessageOut,
)
from storerating.stores import service
from storerating.stores.ratings import submit_rating
from storerating.utils.security import Identity

router = APIRouter(prefix="/stores", tags=["stores"])

store_managers = require_roles(UserRole.ADMIN, UserRole.STORE_OWNER)

@router.get("", response_model=list[StoreAggregateOut])
def list_stores(db: Session = Depends(get_db)):
    return service.list_stores(db)

@router.get("/{store_id}", response_model=StoreDetailOut)
def get_store(store_id: int, db: Session = Depends(get_db), identity: Identity | None = Depends(get_optional_identity)):
    caller_id = identity.user_id if identity else None
    return service.get_store(db, store_id, caller_id)

@router.post("", response_model=StoreEnvelope, status_code=status.HTTP_201_CREATED)
def create_store(body: StoreIn, db: Session = Depends(get_db), identity: Identity = Depends(store_managers)):
    store = service.create_store(db, body.name, body.email, body.address, owner_id=identity.user_id)
    return {"message": "Store created successfully", "store": store}

@router.put("/{store_id}", response_model=StoreEnvelope)
def update_store(store_id: int, body: StoreIn, db: Session = Depends(get_db), identity: Identity = Depends(store_managers)):
    store = service.update_store(
        db, store_id, identity.user_id, identity.is_admin,
        name=body.name, email=body.email, address=body.address,
    )
    return {"message": "Store updated successfully", "store": store}

@router.delete("/{store_id}", response_model=MessageOut)
def delete_store(store_id: int, db: Session = Depends(get_db), identity: Identity = Depends(store_managers)):
    service.delete_store(db, store_id, identity.user_id, identity.is_admin)
    return {"message": "Store deleted successfully"}

@router.post("/{store_id}/rate", response_model=MessageOut)
def rate_store(store_id: int, body: RatingIn, db: Session = Depends(get_db), identity: Identity = Depends(require_roles(UserRole.USER))):
    submit_rating(db, identity.user_id, store_id, body.rating)
    return {"message": "Rating submitted successfully"}
