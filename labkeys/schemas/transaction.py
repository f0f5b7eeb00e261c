from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

class BorrowRequest(BaseModel):
    keyId: str = Field(..., min_length=1, max_length=50)
    purpose: Optional[str] = None
    teacherId: Optional[str] = Field(None, description="Borrower, admins only; defaults to the caller")

class ReturnRequest(BaseModel):
    keyId: str = Field(..., min_length=1, max_length=50)
    remarks: Optional[str] = None
    teacherId: Optional[str] = Field(None, description="Borrower, admins only; defaults to the caller")

class KioskBorrowRequest(BaseModel):
    """Public kiosk: the teacher id is asserted by the caller, no password"""
    keyId: str = Field(..., min_length=1, max_length=50)
    teacherId: str = Field(..., min_length=1, max_length=50)
    purpose: Optional[str] = None

class KioskReturnRequest(BaseModel):
    keyId: str = Field(..., min_length=1, max_length=50)
    teacherId: str = Field(..., min_length=1, max_length=50)
    remarks: Optional[str] = None

class TransactionResponse(BaseModel):
    id: int
    keyId: str
    teacherId: str
    borrowDate: datetime
    returnDate: Optional[datetime] = None
    purpose: Optional[str] = None
    remarks: Optional[str] = None
    lab: Optional[str] = None
    teacherName: Optional[str] = None
    isOverdue: bool

class DeletedTransactionResponse(BaseModel):
    id: int
    keyId: str
    teacherId: str
    wasOpen: bool

class DashboardStats(BaseModel):
    totalKeys: int
    availableKeys: int
    borrowedKeys: int
    totalTeachers: int
    overdueKeys: int

class DashboardResponse(BaseModel):
    stats: DashboardStats
    overdueTransactions: List[TransactionResponse] = []
