"""Key and teacher lookups plus the admin inventory operations.

Every function works on the caller's ``Session`` and never commits, so the
checkout coordinator can compose them into its own unit of work.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session
from labkeys.errors import KeyNotFound, TeacherNotFound, DuplicateKey, DuplicateTeacher
from labkeys.models import User, LabKey, KeyTransaction, KEY_AVAILABLE

logger = logging.getLogger(__name__)


def find_key(db: Session, key_id: str, for_update: bool = False) -> LabKey:
    """Get a key, locking its row when ``for_update`` is set."""
    query = db.query(LabKey).filter(LabKey.key_id == key_id)
    if for_update:
        query = query.with_for_update().populate_existing()
    key = query.first()
    if not key:
        raise KeyNotFound(key_id)
    return key


def find_teacher(db: Session, teacher_id: str) -> User:
    teacher = db.query(User).filter(
        User.user_id == teacher_id,
        User.role == 'teacher'
    ).first()
    if not teacher:
        raise TeacherNotFound(teacher_id)
    return teacher


def set_key_status(db: Session, key: LabKey, status: str) -> None:
    logger.debug(f"Key {key.key_id}: {key.status} -> {status}")
    key.status = status


def open_transaction_for_key(db: Session, key_id: str) -> Optional[KeyTransaction]:
    return db.query(KeyTransaction).filter(
        KeyTransaction.key_id == key_id,
        KeyTransaction.return_date.is_(None)
    ).first()


def list_keys(db: Session) -> List[LabKey]:
    return db.query(LabKey).order_by(LabKey.key_id).all()


def create_key(db: Session, key_id: str, lab: str) -> LabKey:
    if db.query(LabKey).filter(LabKey.key_id == key_id).first():
        raise DuplicateKey(key_id)
    key = LabKey(key_id=key_id, lab=lab, status=KEY_AVAILABLE)
    db.add(key)
    db.flush()
    return key


def list_teachers(db: Session) -> List[User]:
    return db.query(User).filter(User.role == 'teacher').order_by(User.name).all()


def create_teacher(
    db: Session,
    teacher_id: str,
    name: str,
    email: Optional[str] = None,
    department: Optional[str] = None,
    photo_url: Optional[str] = None,
    password_hash: Optional[str] = None,
) -> User:
    if db.query(User).filter(User.user_id == teacher_id).first():
        raise DuplicateTeacher(teacher_id)
    teacher = User(
        user_id=teacher_id,
        name=name,
        email=email,
        department=department,
        photo_url=photo_url,
        password_hash=password_hash,
        role='teacher'
    )
    db.add(teacher)
    db.flush()
    return teacher


def update_teacher(db: Session, teacher_id: str, **changes) -> User:
    """Apply the given column changes; a ``None`` value clears the column."""
    teacher = find_teacher(db, teacher_id)
    for field, value in changes.items():
        setattr(teacher, field, value)
    db.flush()
    return teacher
