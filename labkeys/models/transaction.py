from datetime import datetime
from typing import Optional

from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from labkeys.database import Base
from labkeys.services.overdue import is_overdue
from labkeys.utils.timezone import now_utc, to_local

class KeyTransaction(Base):
    __tablename__ = "key_transaction"

    transaction_id = Column(Integer, primary_key=True, autoincrement=True)
    key_id = Column(String(50), ForeignKey("lab_key.key_id", ondelete="RESTRICT"), nullable=False, index=True)
    teacher_id = Column(String(50), ForeignKey("user.user_id", ondelete="RESTRICT"), nullable=False, index=True)
    borrow_date = Column(DateTime(timezone=True), nullable=False, index=True)
    return_date = Column(DateTime(timezone=True), nullable=True)  # NULL while the key is out
    purpose = Column(Text, nullable=True)
    remarks = Column(Text, nullable=True)

    # Relationships
    key = relationship("LabKey", back_populates="transactions")
    teacher = relationship("User", back_populates="transactions")

    # At most one open transaction per key
    __table_args__ = (
        Index(
            "ix_key_transaction_open_key",
            "key_id",
            unique=True,
            postgresql_where=Column("return_date").is_(None),
            sqlite_where=Column("return_date").is_(None),
        ),
    )

    @property
    def is_open(self) -> bool:
        return self.return_date is None

    def to_dict(self, now: Optional[datetime] = None):
        now = now or now_utc()
        return {
            "id": self.transaction_id,
            "keyId": self.key_id,
            "teacherId": self.teacher_id,
            "borrowDate": to_local(self.borrow_date).isoformat(),
            "returnDate": to_local(self.return_date).isoformat() if self.return_date else None,
            "purpose": self.purpose,
            "remarks": self.remarks,
            "lab": self.key.lab if self.key else None,
            "teacherName": self.teacher.name if self.teacher else None,
            "isOverdue": is_overdue(self.borrow_date, now, return_date=self.return_date),
        }
