from .auth import UserLogin, UserResponse, Token
from .key import KeyCreate, KeyResponse
from .teacher import TeacherBase, TeacherCreate, TeacherUpdate, TeacherResponse
from .transaction import (
    BorrowRequest, ReturnRequest,
    KioskBorrowRequest, KioskReturnRequest,
    TransactionResponse, DeletedTransactionResponse,
    DashboardStats, DashboardResponse,
)

__all__ = [
    "UserLogin", "UserResponse", "Token",
    "KeyCreate", "KeyResponse",
    "TeacherBase", "TeacherCreate", "TeacherUpdate", "TeacherResponse",
    "BorrowRequest", "ReturnRequest",
    "KioskBorrowRequest", "KioskReturnRequest",
    "TransactionResponse", "DeletedTransactionResponse",
    "DashboardStats", "DashboardResponse",
]
