from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional
from labkeys.database import get_db
from labkeys.models.user import User
from labkeys.schemas.transaction import BorrowRequest, ReturnRequest, TransactionResponse
from labkeys.services import checkout
from labkeys.services.auth import get_current_user
from labkeys.services.events import event_publisher, EVENT_BORROWED, EVENT_RETURNED

router = APIRouter(prefix="/api", tags=["Checkout"])

def resolve_teacher_id(current_user: User, requested: Optional[str]) -> str:
    """The caller acts for themselves; only admins may name another teacher."""
    if requested is None or requested == current_user.user_id:
        return current_user.user_id
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only admins can borrow or return keys for another teacher"
        )
    return requested

@router.post("/borrow", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
def borrow_key(
    request: BorrowRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Borrow a key."""
    teacher_id = resolve_teacher_id(current_user, request.teacherId)
    transaction = checkout.borrow_key(db, request.keyId, teacher_id, purpose=request.purpose)
    event_publisher.publish(EVENT_BORROWED, transaction.key_id, transaction.teacher_id, transaction.transaction_id)
    return TransactionResponse(**transaction.to_dict())

@router.post("/return", response_model=TransactionResponse)
def return_key(
    request: ReturnRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Return a key. It must have been borrowed by the teacher it is returned for."""
    teacher_id = resolve_teacher_id(current_user, request.teacherId)
    transaction = checkout.return_key(db, request.keyId, teacher_id, remarks=request.remarks)
    event_publisher.publish(EVENT_RETURNED, transaction.key_id, transaction.teacher_id, transaction.transaction_id)
    return TransactionResponse(**transaction.to_dict())
