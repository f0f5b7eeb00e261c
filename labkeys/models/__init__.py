from .user import User
from .key import LabKey, KEY_AVAILABLE, KEY_BORROWED
from .transaction import KeyTransaction

__all__ = [
    "User",
    "LabKey",
    "KEY_AVAILABLE",
    "KEY_BORROWED",
    "KeyTransaction",
]
