"""Checkout coordinator: the only writer of key status and transaction rows.

Each operation is a single unit of work. The key row is locked first
(``SELECT ... FOR UPDATE``; SQLite connections take the write lock at BEGIN),
so two requests for the same key are serialised and the second one sees the
first one's result. The partial unique index on open transactions backs this
up at the store level.

Return policy: a key can only be returned under the teacher id stored on its
open transaction, whichever flow the request comes from.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from labkeys.database import unit_of_work
from labkeys.errors import (
    LabKeysError,
    KeyUnavailable,
    NotBorrowedByCaller,
    KeyCheckedOut,
    ActiveTransactions,
    TransactionNotFound,
)
from labkeys.models import KeyTransaction, KEY_AVAILABLE, KEY_BORROWED
from labkeys.services import directory
from labkeys.utils.timezone import now_utc, as_utc

logger = logging.getLogger(__name__)


def borrow_key(
    db: Session,
    key_id: str,
    teacher_id: str,
    purpose: Optional[str] = None,
    now: Optional[datetime] = None,
) -> KeyTransaction:
    """Check a key out to a teacher and return the new open transaction."""
    borrow_date = as_utc(now) if now else now_utc()
    try:
        with unit_of_work(db):
            key = directory.find_key(db, key_id, for_update=True)
            if key.status != KEY_AVAILABLE or directory.open_transaction_for_key(db, key_id):
                raise KeyUnavailable(key_id)
            directory.find_teacher(db, teacher_id)

            transaction = KeyTransaction(
                key_id=key_id,
                teacher_id=teacher_id,
                borrow_date=borrow_date,
                purpose=purpose,
            )
            db.add(transaction)
            directory.set_key_status(db, key, KEY_BORROWED)
            try:
                db.flush()
            except IntegrityError as e:
                # Another writer opened a transaction for this key first
                raise KeyUnavailable(key_id) from e
    except LabKeysError as e:
        logger.warning(f"Borrow rejected: {e.message}")
        raise

    db.refresh(transaction)
    logger.info(f"Key {key_id} borrowed by {teacher_id} (transaction {transaction.transaction_id})")
    return transaction


def return_key(
    db: Session,
    key_id: str,
    teacher_id: str,
    remarks: Optional[str] = None,
    now: Optional[datetime] = None,
) -> KeyTransaction:
    """Close the open transaction for a key borrowed by ``teacher_id``."""
    return_date = as_utc(now) if now else now_utc()
    try:
        with unit_of_work(db):
            key = directory.find_key(db, key_id, for_update=True)
            transaction = directory.open_transaction_for_key(db, key_id)
            if transaction is None or transaction.teacher_id != teacher_id:
                raise NotBorrowedByCaller(key_id, teacher_id)

            transaction.return_date = return_date
            if remarks is not None:
                transaction.remarks = remarks
            directory.set_key_status(db, key, KEY_AVAILABLE)
    except LabKeysError as e:
        logger.warning(f"Return rejected: {e.message}")
        raise

    db.refresh(transaction)
    logger.info(f"Key {key_id} returned by {teacher_id} (transaction {transaction.transaction_id})")
    return transaction


def admin_delete_transaction(db: Session, transaction_id: int) -> dict:
    """Hard-delete a transaction; deleting an open one frees its key.

    The row is read again after its key is locked, so whether it is still
    open is decided under the same lock as Borrow and Return.

    Returns a summary of the removed row for the caller to report.
    """
    with unit_of_work(db):
        transaction = _get_transaction(db, transaction_id)
        key = directory.find_key(db, transaction.key_id, for_update=True)
        transaction = _get_transaction(db, transaction_id, refresh=True)

        summary = {
            "id": transaction.transaction_id,
            "keyId": transaction.key_id,
            "teacherId": transaction.teacher_id,
            "wasOpen": transaction.is_open,
        }
        if transaction.is_open:
            directory.set_key_status(db, key, KEY_AVAILABLE)
            logger.info(f"Deleting open transaction {transaction_id}, key {key.key_id} reset to {KEY_AVAILABLE}")
        db.delete(transaction)

    logger.info(f"Transaction {transaction_id} deleted")
    return summary


def _get_transaction(db: Session, transaction_id: int, refresh: bool = False) -> KeyTransaction:
    query = db.query(KeyTransaction).filter(KeyTransaction.transaction_id == transaction_id)
    if refresh:
        query = query.populate_existing()
    transaction = query.first()
    if not transaction:
        raise TransactionNotFound(transaction_id)
    return transaction


def delete_key(db: Session, key_id: str) -> None:
    """Delete a key and its closed history. Refused while the key is out."""
    with unit_of_work(db):
        key = directory.find_key(db, key_id, for_update=True)
        if key.status == KEY_BORROWED or directory.open_transaction_for_key(db, key_id):
            logger.warning(f"Refusing to delete checked out key {key_id}")
            raise KeyCheckedOut(key_id)
        for transaction in key.transactions:
            db.delete(transaction)
        db.delete(key)

    logger.info(f"Key {key_id} deleted")


def delete_teacher(db: Session, teacher_id: str) -> None:
    """Delete a teacher and their closed history. Refused while they hold keys."""
    with unit_of_work(db):
        teacher = directory.find_teacher(db, teacher_id)
        open_count = db.query(KeyTransaction).filter(
            KeyTransaction.teacher_id == teacher_id,
            KeyTransaction.return_date.is_(None)
        ).count()
        if open_count:
            logger.warning(f"Refusing to delete teacher {teacher_id} with {open_count} active borrow(s)")
            raise ActiveTransactions(teacher_id, open_count)
        for transaction in teacher.transactions:
            db.delete(transaction)
        db.delete(teacher)

    logger.info(f"Teacher {teacher_id} deleted")
