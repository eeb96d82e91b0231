"""
Per-session composition root.

A `Workspace` owns one gateway and one controller (with its store) per feature.
Nothing here is global: the CLI builds a workspace per invocation and the GUI
one per window.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from .features.common import FeatureController
from .features.drive import DriveController
from .features.food import FoodController
from .features.notes import NotesController
from .features.pokemon import PokemonController
from .features.profiles import ensure_profile
from .features.tasks import TasksController
from .gateway.api import DataGateway
from .gateway.sqlite_gateway import SqliteGateway
from .notify import Notifier
from .orchestrator import CallRunner
from .paths import WorkspacePaths, ensure_workspace_directories, resolve_workspace_paths
from .results import Failure
from .session import Session
from .settings import DeskSettings, load_settings

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Workspace:
    """
    Controllers for every feature, bound to one session and gateway.

    Attributes
    ----------
    session:
        Acting user and view defaults.
    gateway:
        Storage used by every controller.
    """

    session: Session
    gateway: DataGateway
    tasks: TasksController
    drive: DriveController
    food: FoodController
    pokemon: PokemonController
    notes: NotesController

    @classmethod
    def build(
        cls,
        gateway: DataGateway,
        notifier: Notifier,
        session: Session,
        *,
        runner: CallRunner | None = None,
    ) -> "Workspace":
        return cls(
            session=session,
            gateway=gateway,
            tasks=TasksController(gateway, notifier, session, runner=runner),
            drive=DriveController(gateway, notifier, session, runner=runner),
            food=FoodController(gateway, notifier, session, runner=runner),
            pokemon=PokemonController(gateway, notifier, session, runner=runner),
            notes=NotesController(gateway, notifier, session, runner=runner),
        )

    @classmethod
    def open(
        cls,
        notifier: Notifier,
        *,
        data_root: Path | None = None,
        runner: CallRunner | None = None,
        settings: DeskSettings | None = None,
    ) -> "Workspace":
        """
        Open the on-disk workspace under `data_root` (or the default root).

        The signed-in user's profile is created or refreshed so their posts and
        reviews show a name.
        """
        paths = workspace_paths(data_root)
        settings = settings or load_settings(paths.settings_path)
        session = Session.from_settings(settings)
        gateway = SqliteGateway(db_path=paths.db_path, blobs_root=paths.blobs_root)

        if session.signed_in:
            saved = ensure_profile(
                gateway,
                user_id=str(session.user_id),
                name=session.display_name,
                email=session.email,
            )
            if isinstance(saved, Failure):
                logger.warning("Could not save profile for %s: %s", session.user_id, saved.detail)

        workspace = cls.build(gateway, notifier, session, runner=runner)
        workspace.drive.view_mode = settings.view_mode
        logger.info("Opened workspace at %s as %s", paths.data_root, session.user_id or "<anonymous>")
        return workspace

    def controllers(self) -> Iterator[FeatureController]:
        yield self.tasks
        yield self.drive
        yield self.food
        yield self.pokemon
        yield self.notes

    def refresh_all(self) -> None:
        """Reload every collection the session may read."""
        for controller in self.controllers():
            if controller.session.signed_in or not controller.fetch_requirements():
                controller.refresh()

    def close(self) -> None:
        """Dispose all stores; results of calls still in flight are dropped."""
        for controller in self.controllers():
            controller.dispose()


def workspace_paths(data_root: Path | None = None) -> WorkspacePaths:
    """Resolve and create the workspace directories."""
    paths = resolve_workspace_paths(data_root)
    ensure_workspace_directories(paths)
    return paths
