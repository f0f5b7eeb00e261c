"""Domain errors raised by the checkout services.

Routes never catch these; the handlers registered in ``labkeys.main`` turn
them into JSON responses with the status code of their family.
"""


class LabKeysError(Exception):
    """Base class. ``code`` is the stable machine-readable kind."""
    code = "error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(LabKeysError):
    status_code = 404


class KeyNotFound(NotFound):
    code = "key_not_found"

    def __init__(self, key_id: str):
        super().__init__(f"Key {key_id} not found")
        self.key_id = key_id


class TeacherNotFound(NotFound):
    code = "teacher_not_found"

    def __init__(self, teacher_id: str):
        super().__init__(f"Teacher {teacher_id} not found")
        self.teacher_id = teacher_id


class TransactionNotFound(NotFound):
    code = "transaction_not_found"

    def __init__(self, transaction_id: int):
        super().__init__(f"Transaction {transaction_id} not found")
        self.transaction_id = transaction_id


class Conflict(LabKeysError):
    status_code = 409


class KeyUnavailable(Conflict):
    code = "key_unavailable"

    def __init__(self, key_id: str):
        super().__init__(f"Key {key_id} is already borrowed")
        self.key_id = key_id


class NotBorrowedByCaller(Conflict):
    code = "not_borrowed_by_caller"

    def __init__(self, key_id: str, teacher_id: str):
        super().__init__(f"Key {key_id} is not borrowed by teacher {teacher_id}")
        self.key_id = key_id
        self.teacher_id = teacher_id


class KeyCheckedOut(Conflict):
    code = "key_checked_out"

    def __init__(self, key_id: str):
        super().__init__(f"Cannot delete key {key_id} while it is checked out")
        self.key_id = key_id


class ActiveTransactions(Conflict):
    code = "active_transactions"

    def __init__(self, teacher_id: str, count: int):
        super().__init__(f"Cannot delete teacher {teacher_id} with {count} active borrow(s)")
        self.teacher_id = teacher_id
        self.count = count


class DuplicateKey(Conflict):
    code = "duplicate_key"

    def __init__(self, key_id: str):
        super().__init__(f"Key ID {key_id} already exists")


class DuplicateTeacher(Conflict):
    code = "duplicate_teacher"

    def __init__(self, teacher_id: str):
        super().__init__(f"Teacher ID {teacher_id} already exists")


class StoreUnavailable(LabKeysError):
    code = "store_unavailable"
    status_code = 503

    def __init__(self, message: str = "Database is unavailable"):
        super().__init__(message)
