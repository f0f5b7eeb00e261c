from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from labkeys.database import get_db, unit_of_work
from labkeys.models.user import User
from labkeys.schemas.key import KeyCreate, KeyResponse
from labkeys.services import checkout, directory
from labkeys.services.auth import get_current_user, require_admin

router = APIRouter(prefix="/api/keys", tags=["Keys"])

@router.get("", response_model=List[KeyResponse])
def get_keys(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get all keys with their current status."""
    return [KeyResponse(**key.to_dict()) for key in directory.list_keys(db)]

@router.post("", response_model=KeyResponse, status_code=status.HTTP_201_CREATED)
def create_key(
    key_data: KeyCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Register a new key. New keys start Available."""
    with unit_of_work(db):
        key = directory.create_key(db, key_data.keyId, key_data.lab)
    return KeyResponse(**key.to_dict())

@router.delete("/{key_id}")
def delete_key(
    key_id: str,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete a key that is not checked out."""
    checkout.delete_key(db, key_id)
    return {"message": "Key deleted successfully"}
