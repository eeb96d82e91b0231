"""Domain exceptions raised inside gateway implementations."""

from __future__ import annotations

from ..errors import DeskError


class GatewayError(DeskError):
    """Base error for gateway operations."""


class UnknownTableError(GatewayError):
    """Raised when a call names a table the schema does not define."""


class UnknownColumnError(GatewayError):
    """Raised when filters, ordering or fields name a column the table lacks."""


class BlobExistsError(GatewayError):
    """Raised when an upload targets an existing object without upsert."""
