"""Read side of the transaction ledger."""
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload
from labkeys.database import retry_read
from labkeys.errors import TransactionNotFound
from labkeys.models import User, LabKey, KeyTransaction, KEY_AVAILABLE, KEY_BORROWED
from labkeys.services.overdue import overdue_cutoff
from labkeys.utils.timezone import now_utc


def _with_relations(db: Session):
    return db.query(KeyTransaction).options(
        joinedload(KeyTransaction.key),
        joinedload(KeyTransaction.teacher),
    )


@retry_read
def list_transactions(db: Session, teacher_id: Optional[str] = None) -> List[KeyTransaction]:
    """All transactions, newest first, optionally for one teacher."""
    query = _with_relations(db)
    if teacher_id is not None:
        query = query.filter(KeyTransaction.teacher_id == teacher_id)
    return query.order_by(KeyTransaction.borrow_date.desc(), KeyTransaction.transaction_id.desc()).all()


@retry_read
def list_active(db: Session, teacher_id: Optional[str] = None) -> List[KeyTransaction]:
    """Open transactions, longest outstanding first."""
    query = _with_relations(db).filter(KeyTransaction.return_date.is_(None))
    if teacher_id is not None:
        query = query.filter(KeyTransaction.teacher_id == teacher_id)
    return query.order_by(KeyTransaction.borrow_date.asc()).all()


@retry_read
def list_overdue(db: Session, now: Optional[datetime] = None) -> List[KeyTransaction]:
    cutoff = overdue_cutoff(now or now_utc())
    return _with_relations(db).filter(
        KeyTransaction.return_date.is_(None),
        KeyTransaction.borrow_date <= cutoff
    ).order_by(KeyTransaction.borrow_date.asc()).all()


@retry_read
def get_transaction(db: Session, transaction_id: int) -> KeyTransaction:
    transaction = _with_relations(db).filter(
        KeyTransaction.transaction_id == transaction_id
    ).first()
    if not transaction:
        raise TransactionNotFound(transaction_id)
    return transaction


@retry_read
def dashboard_stats(db: Session, now: Optional[datetime] = None) -> dict:
    """Counts shown on the admin dashboard."""
    cutoff = overdue_cutoff(now or now_utc())
    return {
        "totalKeys": db.query(LabKey).count(),
        "availableKeys": db.query(LabKey).filter(LabKey.status == KEY_AVAILABLE).count(),
        "borrowedKeys": db.query(LabKey).filter(LabKey.status == KEY_BORROWED).count(),
        "totalTeachers": db.query(User).filter(User.role == 'teacher').count(),
        "overdueKeys": db.query(KeyTransaction).filter(
            KeyTransaction.return_date.is_(None),
            KeyTransaction.borrow_date <= cutoff
        ).count(),
    }
