from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from labkeys.database import get_db
from labkeys.schemas.key import KeyResponse
from labkeys.schemas.transaction import KioskBorrowRequest, KioskReturnRequest, TransactionResponse
from labkeys.services import checkout, directory, ledger
from labkeys.services.events import event_publisher, EVENT_BORROWED, EVENT_RETURNED
from labkeys.utils.timezone import now_utc

# Public kiosk in the staff room: no login, the teacher types their id
router = APIRouter(prefix="/api/kiosk", tags=["Kiosk"])

@router.get("/keys", response_model=List[KeyResponse])
def get_keys(db: Session = Depends(get_db)):
    """Get all keys with their current status."""
    return [KeyResponse(**key.to_dict()) for key in directory.list_keys(db)]

@router.get("/active", response_model=List[TransactionResponse])
def get_active(db: Session = Depends(get_db)):
    """Keys currently out."""
    now = now_utc()
    return [TransactionResponse(**t.to_dict(now)) for t in ledger.list_active(db)]

@router.post("/borrow", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
def borrow_key(request: KioskBorrowRequest, db: Session = Depends(get_db)):
    """Borrow a key for the teacher id entered at the kiosk."""
    transaction = checkout.borrow_key(db, request.keyId, request.teacherId, purpose=request.purpose)
    event_publisher.publish(EVENT_BORROWED, transaction.key_id, transaction.teacher_id, transaction.transaction_id)
    return TransactionResponse(**transaction.to_dict())

@router.post("/return", response_model=TransactionResponse)
def return_key(request: KioskReturnRequest, db: Session = Depends(get_db)):
    """Return a key. The entered teacher id must match the borrower on record."""
    transaction = checkout.return_key(db, request.keyId, request.teacherId, remarks=request.remarks)
    event_publisher.publish(EVENT_RETURNED, transaction.key_id, transaction.teacher_id, transaction.transaction_id)
    return TransactionResponse(**transaction.to_dict())
