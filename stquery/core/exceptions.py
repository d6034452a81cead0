"""
stquery Exceptions

Exception hierarchy for error handling.
"""


class STQueryError(Exception):
    """Base exception for stquery"""

    pass


class ValidationError(STQueryError, ValueError):
    """Precondition or input validation failed"""

    pass


class QueryError(STQueryError):
    """Query execution failed"""

    pass


class TaskError(QueryError):
    """A partition task failed after all retries"""

    def __init__(self, partition_id: int, message: str):
        super().__init__(f"partition {partition_id}: {message}")
        self.partition_id = partition_id


class NotImplementedOperationError(STQueryError, NotImplementedError):
    """Operation is declared but has no implementation"""

    pass
