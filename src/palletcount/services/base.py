"""BaseService — foundation for all palletcount services.

Every service receives a :class:`CountStore` at construction time and,
optionally, an identifier factory. Injecting the factory keeps id
generation out of the domain and makes service output deterministic
under test.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from palletcount.services._helpers import new_id
from palletcount.services.result import ErrorCode, ServiceError, ServiceResult

if TYPE_CHECKING:
    from palletcount.domain.errors import CountError
    from palletcount.infrastructure.store import CountStore

logger = logging.getLogger(__name__)


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class CatalogService(BaseService):
            def add_product(self, code: str, ...) -> ServiceResult:
                with self._store.transaction() as conn:
                    ...
    """

    def __init__(
        self,
        store: CountStore,
        *,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._store = store
        self._new_id = id_factory or new_id

    @staticmethod
    def _fail(op: str, code: ErrorCode | str, message: str, **detail: Any) -> ServiceResult:
        """Build a failed result with a structured error."""
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(code=str(code), message=message, detail=detail),
        )

    @classmethod
    def _fail_from(cls, op: str, exc: CountError) -> ServiceResult:
        """Map a domain error onto a failed result, keeping its fields as detail."""
        detail: dict[str, Any] = {}
        for attr in ("field", "value", "item_id", "session_id"):
            if hasattr(exc, attr):
                value = getattr(exc, attr)
                if not isinstance(value, (str, int, float, bool, type(None))):
                    value = repr(value)
                detail[attr] = value
        logger.debug("%s rejected: %s", op, exc)
        return cls._fail(op, exc.code, str(exc), **detail)
