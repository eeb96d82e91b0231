"""
Food feature: a shared feed of food photos with review threads.

Posts are visible to everyone; posting and reviewing require a signed-in user.
The photo is stored first and the row second, with the same rollback as the
drive upload.
"""

from __future__ import annotations

import logging
from typing import Mapping

from ..derive import Projection
from ..entities import FoodPost
from ..gateway.api import NEWEST_FIRST, DataGateway, ProgressCallback
from ..notify import Notifier
from ..orchestrator import CallRunner, Mutation
from ..results import Failure, GatewayResult, Success
from ..session import Session
from .common import (
    FeatureController,
    OnDone,
    checked_image,
    load_profiles,
    new_object_path,
    parse_rows,
    relabel,
)
from .reviews import FOOD_REVIEWS, ReviewBoard

logger = logging.getLogger(__name__)

BUCKET = "foods"
TABLE = "foods"

MODAL_UPLOAD = "upload"
MODAL_POST = "post"

FOOD_PROJECTION: Projection[FoodPost] = Projection(
    name=lambda f: f.name,
    created_at=lambda f: f.created_at,
    text=(lambda f: f.description, lambda f: f.profile.name),
)


# ---------- Actions ----------
def list_foods(gateway: DataGateway) -> GatewayResult:
    """Return every post, newest first, with author profiles attached."""
    result = gateway.list(TABLE, order_by=NEWEST_FIRST)
    if isinstance(result, Failure):
        return relabel(result, "Failed to fetch foods")
    profiles = load_profiles(gateway)
    return parse_rows(
        result.data or (),
        lambda row: FoodPost.from_row(row, profiles.get(str(row.get("user_id")))),
        "Failed to fetch foods",
    )


def upload_food(
    gateway: DataGateway,
    *,
    user_id: str,
    name: str,
    description: str,
    file_name: str,
    data: bytes,
    progress: ProgressCallback | None = None,
) -> GatewayResult:
    title = name.strip()
    if not title:
        return Failure("Food name cannot be empty.")

    path = new_object_path(user_id, file_name)
    uploaded = gateway.upload_blob(BUCKET, path, data, progress=progress)
    if isinstance(uploaded, Failure):
        return relabel(uploaded, "Failed to upload image")

    inserted = gateway.insert(
        TABLE,
        {
            "user_id": user_id,
            "name": title,
            "description": description.strip(),
            "url": gateway.public_url(BUCKET, path),
        },
    )
    if isinstance(inserted, Failure):
        rollback = gateway.delete_blob(BUCKET, path)
        if isinstance(rollback, Failure):
            logger.error("Could not remove orphaned image %s/%s: %s", BUCKET, path, rollback.detail)
        return relabel(inserted, "Failed to save food data")

    return Success(data=inserted.data, message="Food added successfully")


# ---------- Controller ----------
class FoodController(FeatureController[FoodPost]):
    """
    Food feed plus the review thread of the open post.

    Attributes
    ----------
    reviews:
        Review board that follows the post opened with `open_post`.
    """

    name = "food"
    projection = FOOD_PROJECTION

    def __init__(
        self,
        gateway: DataGateway,
        notifier: Notifier,
        session: Session,
        *,
        runner: CallRunner | None = None,
    ) -> None:
        super().__init__(gateway, notifier, session, runner=runner)
        self.reviews = ReviewBoard(gateway, notifier, session, FOOD_REVIEWS, runner=runner)

    def fetch(self) -> GatewayResult:
        return list_foods(self.gateway)

    def fetch_requirements(self) -> Mapping[str, object]:
        return {}

    def open_post(self, post: FoodPost, on_done: OnDone = None) -> bool:
        """Show `post` in its detail modal and load its reviews."""
        self.open_modal(MODAL_POST, post)
        return self.reviews.show(post.id, on_done)

    def close_post(self) -> None:
        self.close_modal(MODAL_POST)
        self.store.clear_selection()
        self.reviews.hide()

    def upload(
        self,
        name: str,
        description: str,
        file_name: str,
        data: bytes,
        mime_type: str | None = None,
        *,
        on_progress: ProgressCallback | None = None,
        on_done: OnDone = None,
    ) -> bool:
        if not self.session.signed_in:
            self.notifier.notify_error("Please login to post food")
            return False
        if checked_image(self.notifier, file_name, data, mime_type) is None:
            return False
        user_id = str(self.user_id)
        return self.submit(
            Mutation(
                key="upload-food",
                call=lambda: upload_food(
                    self.gateway,
                    user_id=user_id,
                    name=name,
                    description=description,
                    file_name=file_name,
                    data=data,
                    progress=on_progress,
                ),
                modal=MODAL_UPLOAD,
                required=self.identity(),
            ),
            on_done,
        )

    def dispose(self) -> None:
        self.reviews.dispose()
        super().dispose()
