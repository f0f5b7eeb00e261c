from datetime import datetime

import pytest
import pytz
from sqlalchemy.exc import IntegrityError

from labkeys.errors import TeacherNotFound
from labkeys.models import LabKey, KeyTransaction, User, KEY_AVAILABLE
from labkeys.services import directory

T0 = datetime(2024, 3, 4, 8, 0, 0, tzinfo=pytz.utc)


class TestLabKeyModel:
    """Key model"""

    def test_new_key_is_available(self, db):
        key = LabKey(key_id="K10", lab="Biology Lab")
        db.add(key)
        db.commit()

        assert key.status == KEY_AVAILABLE
        assert key.to_dict() == {"keyId": "K10", "lab": "Biology Lab", "status": "Available"}

    def test_status_is_constrained(self, db):
        db.add(LabKey(key_id="K11", lab="Biology Lab", status="Lost"))

        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()


class TestKeyTransactionModel:
    """Transaction ledger rows"""

    def test_second_open_transaction_for_key_is_refused(self, db):
        db.add(KeyTransaction(key_id="K01", teacher_id="T001", borrow_date=T0))
        db.commit()

        db.add(KeyTransaction(key_id="K01", teacher_id="T002", borrow_date=T0))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

    def test_closed_transactions_do_not_count(self, db):
        db.add(KeyTransaction(key_id="K01", teacher_id="T001", borrow_date=T0, return_date=T0))
        db.add(KeyTransaction(key_id="K01", teacher_id="T002", borrow_date=T0, return_date=T0))
        db.add(KeyTransaction(key_id="K01", teacher_id="T001", borrow_date=T0))
        db.commit()

        assert db.query(KeyTransaction).count() == 3

    def test_to_dict(self, db):
        transaction = KeyTransaction(key_id="K02", teacher_id="T001", borrow_date=T0, purpose="inventory")
        db.add(transaction)
        db.commit()

        data = transaction.to_dict(now=T0)
        assert data["keyId"] == "K02"
        assert data["lab"] == "Physics Lab"
        assert data["teacherName"] == "Ana Cruz"
        assert data["returnDate"] is None
        assert data["isOverdue"] is False
        assert data["borrowDate"].startswith("2024-03-04T08:00:00")


class TestDirectory:
    """Key and teacher lookups"""

    def test_find_teacher_ignores_admins(self, db):
        assert directory.find_teacher(db, "T001").name == "Ana Cruz"
        with pytest.raises(TeacherNotFound):
            directory.find_teacher(db, "ADMIN")

    def test_update_teacher_changes_only_given_fields(self, db):
        teacher = directory.update_teacher(db, "T001", department="Chemistry", email=None)
        db.commit()

        assert teacher.name == "Ana Cruz"
        assert teacher.department == "Chemistry"
        assert teacher.email is None

    def test_open_transaction_for_key(self, db):
        assert directory.open_transaction_for_key(db, "K01") is None

        db.add(KeyTransaction(key_id="K01", teacher_id="T001", borrow_date=T0))
        db.commit()

        assert directory.open_transaction_for_key(db, "K01").teacher_id == "T001"

    def test_user_to_dict(self, db):
        data = db.get(User, "T002").to_dict()

        assert data == {
            "id": "T002",
            "name": "Ben Reyes",
            "email": None,
            "department": "Mathematics",
            "photoUrl": None,
            "role": "teacher",
        }
