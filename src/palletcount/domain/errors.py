"""Domain error taxonomy.

Every engine failure is raised synchronously to the immediate caller.
Nothing is partially computed: either every component of a total comes
from valid inputs, or the call raises.

An unresolved product is not an error: it yields a free-text entry.
"""

from __future__ import annotations


class CountError(Exception):
    """Base class for all counting-engine errors.

    Attributes:
        code: Stable machine-readable code, reused by the service layer
            when mapping the exception into a ``ServiceError``.
    """

    code = "COUNT_ERROR"


class InvalidFactorError(CountError):
    """A packaging factor is non-positive or not an integer."""

    code = "INVALID_FACTOR"

    def __init__(self, field: str, value: object) -> None:
        self.field = field
        self.value = value
        super().__init__(f"{field} must be a positive integer, got {value!r}")


class InvalidQuantityError(CountError):
    """A quantity component is negative or not an integer."""

    code = "INVALID_QUANTITY"

    def __init__(self, field: str, value: object) -> None:
        self.field = field
        self.value = value
        super().__init__(f"{field} must be a non-negative integer, got {value!r}")


class MissingNameError(CountError):
    """A product entry was finalized without a name or code."""

    code = "MISSING_NAME"

    def __init__(self) -> None:
        super().__init__("Product name or code is required")


class DuplicateItemError(CountError):
    """A line item id is already owned by the session."""

    code = "DUPLICATE_ITEM"

    def __init__(self, item_id: str, session_id: str) -> None:
        self.item_id = item_id
        self.session_id = session_id
        super().__init__(f"Item {item_id!r} already belongs to session {session_id!r}")
