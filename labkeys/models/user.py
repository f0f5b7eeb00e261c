from sqlalchemy import Column, String, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from labkeys.database import Base

class User(Base):
    __tablename__ = "user"

    user_id = Column(String(50), primary_key=True)  # Admin-assigned, e.g. "T001"
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    department = Column(String(255), nullable=True)
    photo_url = Column(String(500), nullable=True)
    password_hash = Column(String(255), nullable=True)  # Kiosk-only teachers have none
    role = Column(String(50), default='teacher', nullable=False, index=True)  # teacher, admin
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    transactions = relationship("KeyTransaction", back_populates="teacher")

    __table_args__ = (
        CheckConstraint("role IN ('teacher', 'admin')", name="chk_user_role"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == 'admin'

    def to_dict(self):
        return {
            "id": self.user_id,
            "name": self.name,
            "email": self.email,
            "department": self.department,
            "photoUrl": self.photo_url,
            "role": self.role,
        }
