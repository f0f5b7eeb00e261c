from sqlalchemy import Column, String, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from labkeys.database import Base

KEY_AVAILABLE = 'Available'
KEY_BORROWED = 'Borrowed'

class LabKey(Base):
    __tablename__ = "lab_key"

    key_id = Column(String(50), primary_key=True)  # Admin-assigned, e.g. "K01"
    lab = Column(String(255), nullable=False)
    status = Column(String(20), default=KEY_AVAILABLE, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    transactions = relationship("KeyTransaction", back_populates="key")

    __table_args__ = (
        CheckConstraint("status IN ('Available', 'Borrowed')", name="chk_key_status"),
    )

    def to_dict(self):
        return {
            "keyId": self.key_id,
            "lab": self.lab,
            "status": self.status,
        }
