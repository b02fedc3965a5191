"""
Custom Application Exceptions
"""


class InventoryException(Exception):
    """Base exception for the inventory application"""
    pass


class ValidationError(InventoryException):
    """Raised when request data is malformed"""
    pass


class NotFoundError(InventoryException):
    """Raised when a movement, task or item does not exist"""
    pass


class InvalidStateError(InventoryException):
    """Raised when an operation is not legal in the record's current state"""
    pass


class IncompleteCountError(InvalidStateError):
    """Raised when completing a cyclic count task with uncounted lines"""

    def __init__(self, task_id: int, missing_line_ids: list):
        self.task_id = task_id
        self.missing_line_ids = list(missing_line_ids)
        super().__init__(
            f"Task {task_id} has {len(self.missing_line_ids)} line(s) without a physical count"
        )


class DatabaseError(InventoryException):
    """Base class for errors surfaced by the persistence adapter"""
    pass


class QueryError(DatabaseError):
    """Raised when a statement fails for reasons other than constraints or connectivity"""
    pass


class ConstraintError(DatabaseError):
    """Raised on unique-key or referential violations"""
    pass


class DatabaseConnectionError(DatabaseError):
    """Raised on transient infrastructure failures; the whole operation is safe to retry"""
    pass
