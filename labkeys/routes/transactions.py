from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from labkeys.database import get_db
from labkeys.models.user import User
from labkeys.schemas.transaction import (
    TransactionResponse,
    DeletedTransactionResponse,
    DashboardResponse,
    DashboardStats,
)
from labkeys.services import checkout, ledger
from labkeys.services.auth import get_current_user, require_admin
from labkeys.services.events import event_publisher, EVENT_DELETED
from labkeys.utils.timezone import now_utc

router = APIRouter(prefix="/api", tags=["Transactions"])

@router.get("/transactions", response_model=List[TransactionResponse])
def get_transactions(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """All transactions for admins, the caller's own for teachers."""
    teacher_id = None if current_user.is_admin else current_user.user_id
    now = now_utc()
    return [TransactionResponse(**t.to_dict(now)) for t in ledger.list_transactions(db, teacher_id)]

@router.get("/transactions/active", response_model=List[TransactionResponse])
def get_active_transactions(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Keys currently out, with overdue flags."""
    teacher_id = None if current_user.is_admin else current_user.user_id
    now = now_utc()
    return [TransactionResponse(**t.to_dict(now)) for t in ledger.list_active(db, teacher_id)]

@router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get one transaction. Teachers can only see their own."""
    transaction = ledger.get_transaction(db, transaction_id)
    if not current_user.is_admin and transaction.teacher_id != current_user.user_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Transaction not found"
        )
    return TransactionResponse(**transaction.to_dict())

@router.delete("/transactions/{transaction_id}", response_model=DeletedTransactionResponse)
def delete_transaction(
    transaction_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Administrative delete. Deleting an open transaction frees its key."""
    deleted = checkout.admin_delete_transaction(db, transaction_id)
    if deleted["wasOpen"]:
        event_publisher.publish(EVENT_DELETED, deleted["keyId"], deleted["teacherId"], deleted["id"])
    return DeletedTransactionResponse(**deleted)

@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Key and teacher counts plus the overdue keys."""
    now = now_utc()
    stats = ledger.dashboard_stats(db, now)
    overdue = ledger.list_overdue(db, now)
    return DashboardResponse(
        stats=DashboardStats(**stats),
        overdueTransactions=[TransactionResponse(**t.to_dict(now)) for t in overdue]
    )
