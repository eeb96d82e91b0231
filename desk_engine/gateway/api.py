"""
Data gateway public API.

This module defines the only persistence surface the features are allowed to
call. Features speak in table names, plain field mappings and bucket-relative
object paths; they never see SQL or filesystem details.

Notes
-----
- Every method returns a `GatewayResult`. Implementations convert their own
  exceptions into `Failure` at the method boundary.
- ``list`` returns ``Success(data=list[dict])``.
- ``insert`` returns the stored row (including the assigned ``id`` and
  ``created_at``) as ``Success.data``.
- ``update`` and ``delete`` report the affected row count as
  ``Success(data={"count": n})``; matching nothing is not an error.
- ``upload_blob`` returns ``Success(data={"url": ..., "path": ...})``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, BinaryIO, Callable, Mapping, Protocol, Sequence

from ..results import GatewayResult

Row = dict[str, Any]
ProgressCallback = Callable[[int, int | None], None]


@dataclass(frozen=True, slots=True)
class OrderBy:
    """
    One ordering term for `DataGateway.list`.

    Attributes
    ----------
    column:
        Column to order by.
    ascending:
        Sort direction.
    """

    column: str
    ascending: bool = True


NEWEST_FIRST: tuple[OrderBy, ...] = (OrderBy("created_at", ascending=False), OrderBy("id", ascending=False))


class DataGateway(Protocol):
    """Table and blob operations consumed by feature actions."""

    def list(
        self,
        table: str,
        filters: Mapping[str, object] | None = None,
        order_by: Sequence[OrderBy] | None = None,
    ) -> GatewayResult:
        """
        Return rows of `table` whose columns equal every value in `filters`.

        Parameters
        ----------
        table:
            Table name.
        filters:
            Equality filters, column -> value.
        order_by:
            Ordering terms applied in sequence.
        """
        raise NotImplementedError

    def insert(self, table: str, fields: Mapping[str, object]) -> GatewayResult:
        """Insert one row; the gateway assigns ``id`` and ``created_at``."""
        raise NotImplementedError

    def update(
        self, table: str, match: Mapping[str, object], fields: Mapping[str, object]
    ) -> GatewayResult:
        """Replace `fields` on every row matching `match`."""
        raise NotImplementedError

    def delete(self, table: str, match: Mapping[str, object]) -> GatewayResult:
        """Delete every row matching `match`."""
        raise NotImplementedError

    def upload_blob(
        self,
        bucket: str,
        path: str,
        data: bytes | BinaryIO,
        *,
        upsert: bool = False,
        progress: ProgressCallback | None = None,
    ) -> GatewayResult:
        """
        Store an object.

        Parameters
        ----------
        bucket:
            Bucket name.
        path:
            Bucket-relative object path.
        data:
            Object bytes or a readable binary stream.
        upsert:
            Replace an existing object instead of failing.
        progress:
            Optional callback receiving ``(bytes_sent, total_bytes)`` as the
            object is written. ``total_bytes`` is None when unknown.
        """
        raise NotImplementedError

    def delete_blob(self, bucket: str, path: str) -> GatewayResult:
        """Remove an object. Removing a missing object succeeds."""
        raise NotImplementedError

    def public_url(self, bucket: str, path: str) -> str:
        """Return the URL under which an object can be displayed."""
        raise NotImplementedError
