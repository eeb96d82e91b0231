from __future__ import annotations

import pytest

from desk_engine.errors import UploadRejectedError
from desk_engine.upload import (
    MAX_IMAGE_BYTES,
    UploadPhase,
    UploadProgress,
    file_extension,
    guess_mime_type,
    validate_image,
)


def test_accepts_images_and_guesses_type() -> None:
    assert validate_image("cat.PNG", 10) == "image/png"
    assert validate_image("cat.webp", 10) == "image/webp"
    assert validate_image("blob", 10, "image/gif") == "image/gif"


def test_rejects_non_images() -> None:
    with pytest.raises(UploadRejectedError, match="Please upload an image file"):
        validate_image("notes.pdf", 10)


def test_size_limit_is_inclusive() -> None:
    assert validate_image("a.jpg", MAX_IMAGE_BYTES) == "image/jpeg"
    with pytest.raises(UploadRejectedError, match="less than 10MB"):
        validate_image("a.jpg", MAX_IMAGE_BYTES + 1)


def test_extension_and_unknown_type() -> None:
    assert file_extension("Photo.JPG") == "jpg"
    assert file_extension("README") == "bin"
    assert guess_mime_type("mystery.zzz") == "application/octet-stream"


def test_progress_runs_to_done() -> None:
    progress = UploadProgress()
    assert progress.snapshot.fraction is None

    progress.start(200)
    progress.advance(50)
    assert progress.snapshot.percent == 25
    progress.advance(20)  # stale event never moves backwards
    assert progress.snapshot.sent == 50

    progress.finish()
    assert progress.phase is UploadPhase.DONE
    assert progress.snapshot.fraction == 1.0


def test_progress_without_total_is_indeterminate() -> None:
    progress = UploadProgress()
    progress.start(None)
    progress.advance(10)
    assert progress.snapshot.fraction is None
    progress.advance(10, total=40)
    assert progress.snapshot.percent == 25


def test_failure_keeps_message_and_ignores_late_events() -> None:
    progress = UploadProgress()
    progress.advance(5)
    assert progress.phase is UploadPhase.IDLE

    progress.start(10)
    progress.fail("Failed to upload file")
    progress.advance(10)
    progress.finish()
    assert progress.phase is UploadPhase.FAILED
    assert progress.snapshot.error == "Failed to upload file"

    progress.start(10)
    assert progress.phase is UploadPhase.UPLOADING
    progress.reset()
    assert progress.phase is UploadPhase.IDLE
