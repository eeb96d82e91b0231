"""
Drive feature: a personal image gallery backed by blob storage.

Storage ordering
----------------
- Upload: blob first, then the metadata row. If the row cannot be written the
  blob is removed again so no unreachable object is left behind.
- Delete: the owned row is looked up first, then the blob is removed, then the
  row. If the blob cannot be removed the row is kept, so metadata never points
  at a missing object. If the row delete fails after the blob is gone, the row
  is left dangling; this is not reconciled.
"""

from __future__ import annotations

import logging

from ..derive import Projection
from ..entities import FileItem
from ..gateway.api import NEWEST_FIRST, DataGateway, ProgressCallback
from ..orchestrator import Mutation
from ..results import Failure, GatewayResult, Success
from .common import (
    FeatureController,
    OnDone,
    checked_image,
    expect_rows,
    new_object_path,
    parse_rows,
    relabel,
)

logger = logging.getLogger(__name__)

BUCKET = "drive"
TABLE = "files"

MODAL_UPLOAD = "upload"
MODAL_UPDATE = "update"
MODAL_DELETE = "delete"

FILE_PROJECTION: Projection[FileItem] = Projection(
    name=lambda f: f.name,
    created_at=lambda f: f.created_at,
)


# ---------- Actions ----------
def list_files(gateway: DataGateway, user_id: str) -> GatewayResult:
    result = gateway.list(TABLE, {"user_id": user_id}, NEWEST_FIRST)
    if isinstance(result, Failure):
        return relabel(result, "Failed to fetch files")
    return parse_rows(result.data or (), FileItem.from_row, "Failed to fetch files")


def upload_file(
    gateway: DataGateway,
    *,
    user_id: str,
    file_name: str,
    data: bytes,
    mime_type: str,
    progress: ProgressCallback | None = None,
) -> GatewayResult:
    """
    Store a new file and its metadata.

    Returns
    -------
    GatewayResult
        ``Success(data={"url", "name"})`` or a Failure.
    """
    path = new_object_path(user_id, file_name)
    uploaded = gateway.upload_blob(BUCKET, path, data, progress=progress)
    if isinstance(uploaded, Failure):
        return relabel(uploaded, "Failed to upload file")

    url = gateway.public_url(BUCKET, path)
    inserted = gateway.insert(
        TABLE,
        {
            "name": file_name,
            "size": len(data),
            "type": mime_type,
            "url": url,
            "path": path,
            "user_id": user_id,
        },
    )
    if isinstance(inserted, Failure):
        rollback = gateway.delete_blob(BUCKET, path)
        if isinstance(rollback, Failure):
            logger.error("Could not remove orphaned upload %s/%s: %s", BUCKET, path, rollback.detail)
        return relabel(inserted, "Failed to save file metadata")

    return Success(data={"url": url, "name": file_name}, message="File uploaded successfully!")


def update_file(
    gateway: DataGateway,
    *,
    file_id: int,
    user_id: str,
    path: str,
    file_name: str,
    data: bytes,
    mime_type: str,
    progress: ProgressCallback | None = None,
) -> GatewayResult:
    """Replace the bytes of an existing file in place and refresh its metadata."""
    removed = gateway.delete_blob(BUCKET, path)
    if isinstance(removed, Failure):
        return relabel(removed, "Failed to delete old file")

    uploaded = gateway.upload_blob(BUCKET, path, data, upsert=True, progress=progress)
    if isinstance(uploaded, Failure):
        return relabel(uploaded, "Failed to upload new file")

    updated = gateway.update(
        TABLE,
        {"id": file_id, "user_id": user_id},
        {
            "name": file_name,
            "size": len(data),
            "type": mime_type,
            "url": gateway.public_url(BUCKET, path),
        },
    )
    return expect_rows(updated, "Failed to update file data", "File updated successfully!")


def delete_file(gateway: DataGateway, *, file_id: int, user_id: str, path: str) -> GatewayResult:
    """
    Delete the blob, then the metadata row (see module notes for ordering).

    The row must belong to `user_id` and point at `path`; otherwise nothing is
    removed.
    """
    owned = gateway.list(TABLE, {"id": file_id, "user_id": user_id})
    if isinstance(owned, Failure):
        return relabel(owned, "Failed to delete file")
    rows = owned.data or ()
    if not rows or rows[0].get("path") != path:
        return Failure("Failed to delete file", detail="no matching row")

    removed = gateway.delete_blob(BUCKET, path)
    if isinstance(removed, Failure):
        return Failure("Failed to delete file from storage", detail=removed.detail)

    deleted = gateway.delete(TABLE, {"id": file_id, "user_id": user_id})
    if isinstance(deleted, Failure):
        logger.error("Blob %s/%s removed but metadata row %s remains", BUCKET, path, file_id)
    return expect_rows(deleted, "Failed to delete file metadata", "File has been deleted successfully")


# ---------- Controller ----------
class DriveController(FeatureController[FileItem]):
    """
    Drive gallery bound to a session.

    Attributes
    ----------
    view_mode:
        ``"grid"`` or ``"list"``; presentation only.
    """

    name = "drive"
    projection = FILE_PROJECTION

    view_mode: str = "grid"

    def fetch(self) -> GatewayResult:
        return list_files(self.gateway, str(self.user_id))

    def upload(
        self,
        file_name: str,
        data: bytes,
        mime_type: str | None = None,
        *,
        on_progress: ProgressCallback | None = None,
        on_done: OnDone = None,
    ) -> bool:
        """Validate and upload a new image. Rejected files are reported, not raised."""
        if not self._require_login():
            return False
        mime = checked_image(self.notifier, file_name, data, mime_type)
        if mime is None:
            return False
        user_id = str(self.user_id)
        return self.submit(
            Mutation(
                key="upload-file",
                call=lambda: upload_file(
                    self.gateway,
                    user_id=user_id,
                    file_name=file_name,
                    data=data,
                    mime_type=mime,
                    progress=on_progress,
                ),
                modal=MODAL_UPLOAD,
                required=self.identity(),
            ),
            on_done,
        )

    def replace_selected(
        self,
        file_name: str,
        data: bytes,
        mime_type: str | None = None,
        *,
        on_progress: ProgressCallback | None = None,
        on_done: OnDone = None,
    ) -> bool:
        """Replace the bytes of the selected file."""
        if not self._require_login():
            return False
        mime = checked_image(self.notifier, file_name, data, mime_type)
        if mime is None:
            return False
        item = self.store.selected
        file_id = item.id if item is not None else 0
        path = item.path if item is not None else ""
        user_id = str(self.user_id)
        return self.submit(
            Mutation(
                key="update-file",
                call=lambda: update_file(
                    self.gateway,
                    file_id=file_id,
                    user_id=user_id,
                    path=path,
                    file_name=file_name,
                    data=data,
                    mime_type=mime,
                    progress=on_progress,
                ),
                modal=MODAL_UPDATE,
                required={**self.identity(), "file": item},
                precondition_message="Select a file first",
            ),
            on_done,
        )

    def delete_selected(self, on_done: OnDone = None) -> bool:
        """Delete the file selected by the confirmation dialog."""
        item = self.store.selected
        file_id = item.id if item is not None else 0
        path = item.path if item is not None else ""
        user_id = str(self.user_id)
        return self.submit(
            Mutation(
                key="delete-file",
                call=lambda: delete_file(self.gateway, file_id=file_id, user_id=user_id, path=path),
                modal=MODAL_DELETE,
                required={**self.identity(), "file": item},
                precondition_message="Please login to delete files" if not self.user_id else "Select a file first",
                close_modal_on_error=True,
            ),
            on_done,
        )

    def _require_login(self) -> bool:
        if self.session.signed_in:
            return True
        self.notifier.notify_error("Please login to manage files")
        return False
