"""Author profiles shown next to food posts and reviews."""

from __future__ import annotations

import logging

from ..entities import Profile
from ..gateway.api import DataGateway
from ..results import Failure, GatewayResult, Success
from .common import affected, relabel

logger = logging.getLogger(__name__)

TABLE = "profiles"


def ensure_profile(gateway: DataGateway, *, user_id: str, name: str, email: str = "") -> GatewayResult:
    """
    Create or refresh the profile for `user_id`.

    Returns
    -------
    GatewayResult
        ``Success(data=Profile)`` or a Failure.
    """
    uid = user_id.strip()
    if not uid:
        return Failure("A user id is required.")
    display = name.strip() or uid
    fields = {"name": display, "email": email.strip()}

    updated = gateway.update(TABLE, {"user_id": uid}, fields)
    if isinstance(updated, Failure):
        return relabel(updated, "Failed to save profile")
    if affected(updated) == 0:
        inserted = gateway.insert(TABLE, {"user_id": uid, **fields})
        if isinstance(inserted, Failure):
            return relabel(inserted, "Failed to save profile")
        logger.info("Created profile for %s", uid)

    return Success(data=Profile(user_id=uid, name=display, email=fields["email"]), message="Profile saved")
