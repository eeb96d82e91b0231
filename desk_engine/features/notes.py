"""Notes feature: titled plain-text notes with a selected note open in the editor."""

from __future__ import annotations

from ..derive import Projection
from ..entities import Note
from ..gateway.api import NEWEST_FIRST, DataGateway
from ..orchestrator import Mutation
from ..results import Failure, GatewayResult, Success
from ..state import EntityStore
from .common import FeatureController, OnDone, expect_rows, parse_rows, relabel

TABLE = "notes"

UNTITLED = "Untitled"

MODAL_DELETE = "delete"

NOTE_PROJECTION: Projection[Note] = Projection(
    name=lambda n: n.title,
    created_at=lambda n: n.created_at,
    text=(lambda n: n.note,),
)


# ---------- Actions ----------
def list_notes(gateway: DataGateway, user_id: str) -> GatewayResult:
    result = gateway.list(TABLE, {"user_id": user_id}, NEWEST_FIRST)
    if isinstance(result, Failure):
        return relabel(result, "Failed to fetch notes")
    return parse_rows(result.data or (), Note.from_row, "Failed to fetch notes")


def create_note(gateway: DataGateway, *, user_id: str) -> GatewayResult:
    """Add an empty note titled ``Untitled``."""
    result = gateway.insert(TABLE, {"user_id": user_id, "title": UNTITLED, "note": ""})
    if isinstance(result, Failure):
        return relabel(result, "Failed to create note")
    return Success(data=result.data, message="Your note has been added")


def update_note(gateway: DataGateway, *, note_id: int, user_id: str, title: str, body: str) -> GatewayResult:
    """Save a note. An empty title is stored as ``Untitled``."""
    result = gateway.update(
        TABLE,
        {"id": note_id, "user_id": user_id},
        {"title": title.strip() or UNTITLED, "note": body},
    )
    return expect_rows(result, "Failed to update note", "Note has been updated")


def delete_note(gateway: DataGateway, *, note_id: int, user_id: str) -> GatewayResult:
    result = gateway.delete(TABLE, {"id": note_id, "user_id": user_id})
    return expect_rows(result, "Failed to delete note", "Note has been deleted")


# ---------- Controller ----------
class NotesController(FeatureController[Note]):
    """Note list and editor state bound to a session."""

    name = "notes"
    projection = NOTE_PROJECTION

    def fetch(self) -> GatewayResult:
        return list_notes(self.gateway, str(self.user_id))

    def after_fetch(self, store: EntityStore[Note]) -> None:
        """
        Keep the editor pointed at a live note.

        The previous selection is replaced by its refreshed copy, or by the
        first note when it no longer exists.
        """
        current = store.selected
        fresh = None
        if current is not None:
            fresh = next((n for n in store.items if n.id == current.id), None)
        if fresh is None and store.items:
            fresh = store.items[0]
        if fresh != current:
            store.select(fresh)

    def create(self, on_done: OnDone = None) -> bool:
        user_id = self.user_id
        return self.submit(
            Mutation(
                key="create-note",
                call=lambda: create_note(self.gateway, user_id=str(user_id)),
                required=self.identity(),
                precondition_message="Please login to add notes",
            ),
            on_done,
        )

    def save_selected(self, title: str, body: str, on_done: OnDone = None) -> bool:
        note = self.store.selected
        note_id = note.id if note is not None else 0
        user_id = self.user_id
        return self.submit(
            Mutation(
                key="update-note",
                call=lambda: update_note(
                    self.gateway, note_id=note_id, user_id=str(user_id), title=title, body=body
                ),
                required={**self.identity(), "note": note},
                precondition_message="Select a note first" if self.user_id else "Please log in first",
            ),
            on_done,
        )

    def delete_selected(self, on_done: OnDone = None) -> bool:
        note = self.store.selected
        note_id = note.id if note is not None else 0
        user_id = self.user_id
        return self.submit(
            Mutation(
                key="delete-note",
                call=lambda: delete_note(self.gateway, note_id=note_id, user_id=str(user_id)),
                modal=MODAL_DELETE,
                required={**self.identity(), "note": note},
                close_modal_on_error=True,
            ),
            on_done,
        )
