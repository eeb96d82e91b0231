"""
Review threads shared by the food and pokemon features.

A `ReviewTable` names the table, the parent foreign key column and the subject
used in messages. The same actions and `ReviewBoard` controller serve both
``food_reviews`` and ``pokemon_reviews``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from ..derive import Projection
from ..entities import Review
from ..gateway.api import NEWEST_FIRST, DataGateway
from ..notify import Notifier
from ..orchestrator import CallRunner, Mutation
from ..results import Failure, GatewayResult, Success
from ..session import Session
from .common import FeatureController, OnDone, expect_rows, load_profiles, parse_rows, relabel

MODAL_UPDATE_REVIEW = "update-review"
MODAL_DELETE_REVIEW = "delete-review"

REVIEW_PROJECTION: Projection[Review] = Projection(
    name=lambda r: r.comment,
    created_at=lambda r: r.created_at,
    text=(lambda r: r.profile.name,),
)


@dataclass(frozen=True, slots=True)
class ReviewTable:
    """
    Where a kind of review lives.

    Attributes
    ----------
    table:
        Review table name.
    parent_key:
        Foreign key column pointing at the reviewed record.
    subject:
        Capitalized noun used in messages, e.g. ``"Food"``.
    """

    table: str
    parent_key: str
    subject: str

    @property
    def noun(self) -> str:
        return self.subject.lower()


FOOD_REVIEWS = ReviewTable(table="food_reviews", parent_key="food_id", subject="Food")
POKEMON_REVIEWS = ReviewTable(table="pokemon_reviews", parent_key="pokemon_id", subject="Pokemon")


# ---------- Actions ----------
def list_reviews(gateway: DataGateway, kind: ReviewTable, parent_id: int) -> GatewayResult:
    """Return the reviews of one record, newest first, with author profiles attached."""
    message = f"Failed to fetch {kind.noun} reviews"
    result = gateway.list(kind.table, {kind.parent_key: parent_id}, NEWEST_FIRST)
    if isinstance(result, Failure):
        return relabel(result, message)
    profiles = load_profiles(gateway)
    return parse_rows(
        result.data or (),
        lambda row: Review.from_row(
            row, parent_key=kind.parent_key, profile=profiles.get(str(row.get("user_id")))
        ),
        message,
    )


def create_review(
    gateway: DataGateway, kind: ReviewTable, *, parent_id: int, user_id: str, comment: str
) -> GatewayResult:
    text = comment.strip()
    if not text:
        return Failure("Review cannot be empty.")
    result = gateway.insert(kind.table, {"user_id": user_id, kind.parent_key: parent_id, "comment": text})
    if isinstance(result, Failure):
        return relabel(result, f"Failed to create {kind.noun} review")
    return Success(data=result.data, message=f"{kind.subject} review created successfully")


def update_review(
    gateway: DataGateway, kind: ReviewTable, *, review_id: int, user_id: str, comment: str
) -> GatewayResult:
    """Edit a review. Only the review's author matches."""
    text = comment.strip()
    if not text:
        return Failure("Review cannot be empty.")
    result = gateway.update(kind.table, {"id": review_id, "user_id": user_id}, {"comment": text})
    return expect_rows(
        result, f"Failed to update {kind.noun} review", f"{kind.subject} review updated successfully"
    )


def delete_review(gateway: DataGateway, kind: ReviewTable, *, review_id: int, user_id: str) -> GatewayResult:
    result = gateway.delete(kind.table, {"id": review_id, "user_id": user_id})
    return expect_rows(
        result, f"Failed to delete {kind.noun} review", f"{kind.subject} review deleted successfully"
    )


# ---------- Controller ----------
class ReviewBoard(FeatureController[Review]):
    """
    Review thread of the currently shown parent record.

    Reading needs only a parent; writing also needs a signed-in user.
    """

    projection = REVIEW_PROJECTION

    def __init__(
        self,
        gateway: DataGateway,
        notifier: Notifier,
        session: Session,
        kind: ReviewTable,
        *,
        runner: CallRunner | None = None,
    ) -> None:
        self.kind = kind
        self.name = kind.table
        self.parent_id: int | None = None
        super().__init__(gateway, notifier, session, runner=runner)

    def fetch(self) -> GatewayResult:
        return list_reviews(self.gateway, self.kind, int(self.parent_id or 0))

    def fetch_requirements(self) -> Mapping[str, object]:
        return {"parent_id": self.parent_id}

    def show(self, parent_id: int, on_done: OnDone = None) -> bool:
        """Switch to another parent record and load its reviews."""
        if parent_id != self.parent_id:
            self.parent_id = parent_id
            self.store.replace_all(())
            self.store.clear_selection()
        return self.refresh(on_done)

    def hide(self) -> None:
        self.parent_id = None
        self.store.replace_all(())
        self.store.clear_selection()

    def create(self, comment: str, on_done: OnDone = None) -> bool:
        parent_id = self.parent_id
        user_id = self.user_id
        return self.submit(
            Mutation(
                key=f"create-{self.kind.table}",
                call=lambda: create_review(
                    self.gateway,
                    self.kind,
                    parent_id=int(parent_id or 0),
                    user_id=str(user_id),
                    comment=comment,
                ),
                required={**self.identity(), "parent_id": parent_id},
                precondition_message="Please login to leave a review",
            ),
            on_done,
        )

    def update_selected(self, comment: str, on_done: OnDone = None) -> bool:
        review = self.store.selected
        review_id = review.id if review is not None else 0
        user_id = self.user_id
        return self.submit(
            Mutation(
                key=f"update-{self.kind.table}",
                call=lambda: update_review(
                    self.gateway, self.kind, review_id=review_id, user_id=str(user_id), comment=comment
                ),
                modal=MODAL_UPDATE_REVIEW,
                required={**self.identity(), "review": review},
            ),
            on_done,
        )

    def delete_selected(self, on_done: OnDone = None) -> bool:
        review = self.store.selected
        review_id = review.id if review is not None else 0
        user_id = self.user_id
        return self.submit(
            Mutation(
                key=f"delete-{self.kind.table}",
                call=lambda: delete_review(self.gateway, self.kind, review_id=review_id, user_id=str(user_id)),
                modal=MODAL_DELETE_REVIEW,
                required={**self.identity(), "review": review},
                close_modal_on_error=True,
            ),
            on_done,
        )

    def can_edit(self, review: Review) -> bool:
        """True if `review` belongs to the acting user."""
        return self.session.signed_in and review.user_id == self.user_id
