"""
Shared plumbing for feature modules.

Each feature module exposes plain action functions (``gateway`` first, keyword
arguments after, returning a `GatewayResult`) and a controller class that binds
those actions to an `EntityStore` and an `ActionOrchestrator` for one session.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Generic, Iterable, Mapping, TypeVar

from ..derive import DerivedView, Projection, SortKey
from ..entities import Profile
from ..errors import UploadRejectedError
from ..gateway.api import DataGateway
from ..notify import Notifier
from ..orchestrator import ActionOrchestrator, CallRunner, Mutation, Settled
from ..results import Failure, GatewayResult, Success
from ..session import Session
from ..state import EntityStore
from ..upload import file_extension, validate_image

logger = logging.getLogger(__name__)

T = TypeVar("T")

OnDone = Callable[[Settled], None] | None


def relabel(result: Failure, message: str) -> Failure:
    """Replace a low-level failure message with a user-facing one, keeping the cause as detail."""
    return Failure(message, detail=result.detail or result.message)


def parse_rows(
    rows: Iterable[Mapping[str, Any]], build: Callable[[Mapping[str, Any]], T], message: str
) -> GatewayResult:
    """Build entities from rows, mapping malformed rows to a Failure."""
    try:
        return Success(data=[build(r) for r in rows])
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("%s: malformed row: %s", message, exc)
        return Failure(message, detail=str(exc))


def affected(result: GatewayResult) -> int:
    """Return the row count reported by an update/delete Success (0 if absent)."""
    if isinstance(result, Success) and isinstance(result.data, Mapping):
        return int(result.data.get("count", 0))
    return 0


def expect_rows(result: GatewayResult, message: str, success_message: str) -> GatewayResult:
    """
    Map an update/delete result to a user-facing result.

    Matching no row (wrong id or not the owner) is reported as a failure.
    """
    if isinstance(result, Failure):
        return relabel(result, message)
    if affected(result) == 0:
        return Failure(message, detail="no matching row")
    return Success(message=success_message)


def new_object_path(user_id: str, file_name: str) -> str:
    """Return a collision-free bucket path ``<user_id>/<uuid>.<ext>`` for an upload."""
    return f"{user_id}/{uuid.uuid4()}.{file_extension(file_name)}"


def checked_image(notifier: Notifier, file_name: str, data: bytes, mime_type: str | None) -> str | None:
    """Return the effective MIME type, or None after reporting a rejected file."""
    try:
        return validate_image(file_name, len(data), mime_type)
    except UploadRejectedError as exc:
        notifier.notify_error(str(exc))
        return None


def load_profiles(gateway: DataGateway) -> dict[str, Profile]:
    """
    Return all profiles keyed by user id.

    A failed lookup yields an empty mapping; authors then display as unknown.
    """
    result = gateway.list("profiles")
    if isinstance(result, Failure):
        logger.warning("Profile lookup failed: %s", result.detail or result.message)
        return {}
    profiles: dict[str, Profile] = {}
    for row in result.data or ():
        try:
            profile = Profile.from_row(row)
        except ValueError as exc:
            logger.warning("Skipping malformed profile row: %s", exc)
            continue
        profiles[profile.user_id] = profile
    return profiles


class FeatureController(Generic[T]):
    """
    Binds one feature's actions to a store, an orchestrator and a list view.

    Subclasses set `name` and `projection` and implement `fetch`.

    Attributes
    ----------
    query:
        Current search text.
    sort_key:
        Current ordering.
    """

    name: str = "feature"
    projection: Projection[T]

    def __init__(
        self,
        gateway: DataGateway,
        notifier: Notifier,
        session: Session,
        *,
        runner: CallRunner | None = None,
    ) -> None:
        self.gateway = gateway
        self.notifier = notifier
        self.session = session
        self.store: EntityStore[T] = EntityStore(self.name)
        self.orchestrator: ActionOrchestrator[T] = ActionOrchestrator(
            self.store,
            self.fetch,
            notifier,
            runner=runner,
            fetch_required=self.fetch_requirements,
            on_fetched=self.after_fetch,
        )
        self.query = ""
        self.sort_key: SortKey | str = session.default_sort
        self._view: DerivedView[T] = DerivedView(self.projection)

    # ---------- Hooks ----------
    def fetch(self) -> GatewayResult:
        raise NotImplementedError

    def fetch_requirements(self) -> Mapping[str, object]:
        """Identifiers required before fetching; owned collections need the user id."""
        return {"user_id": self.session.user_id}

    def after_fetch(self, store: EntityStore[T]) -> None:
        """Called after items are replaced by a successful fetch."""

    # ---------- Shared operations ----------
    @property
    def user_id(self) -> str | None:
        return self.session.user_id

    def identity(self) -> dict[str, object]:
        return {"user_id": self.session.user_id}

    def refresh(self, on_done: OnDone = None) -> bool:
        return self.orchestrator.refresh(on_done)

    def visible(self) -> list[T]:
        """Items after search and sort, memoized on (items, query, sort_key)."""
        return self._view.compute(self.store.items, self.query, self.sort_key)

    def submit(self, mutation: Mutation, on_done: OnDone = None) -> bool:
        return self.orchestrator.submit(mutation, on_done)

    def open_modal(self, modal: str, entity: T | None = None) -> None:
        """Select `entity` (if given) and open `modal`."""
        if entity is not None:
            self.store.select(entity)
        self.store.set_modal(modal, True)

    def close_modal(self, modal: str) -> None:
        self.store.set_modal(modal, False)

    def dispose(self) -> None:
        self.store.dispose()
