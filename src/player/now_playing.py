# src/player/now_playing.py
from __future__ import annotations

import logging
import threading
from enum import Enum, auto
from typing import Any, Callable, Optional

from PySide6.QtCore import QObject, Signal

logger = logging.getLogger(__name__)

# Info dictionary keys
TITLE = "title"
ARTIST = "artist"
DURATION = "duration"    # seconds
ELAPSED = "elapsed"      # seconds
RATE = "rate"            # 1.0 playing, 0.0 paused
ARTWORK = "artwork"      # QImage


class RemoteCommand(Enum):
    PLAY = auto()
    PAUSE = auto()
    TOGGLE_PLAY_PAUSE = auto()
    CHANGE_PLAYBACK_POSITION = auto()


class CommandStatus(Enum):
    SUCCESS = auto()
    COMMAND_FAILED = auto()
    NO_HANDLER = auto()


CommandHandler = Callable[..., CommandStatus]


class NowPlayingCenter(QObject):
    """
    The "now playing" surface seen by the desktop (tray, media keys).

    Holds the current info dictionary and the remote-command handlers.
    Anything outside the app's own widgets talks to the player through
    dispatch(), so remote and local commands share one code path.
    """

    infoChanged = Signal(dict)

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._info: dict[str, Any] = {}
        self._targets: dict[RemoteCommand, CommandHandler] = {}
        self._lock = threading.Lock()

    # ----------------------------
    # Info dictionary
    # ----------------------------

    def info(self) -> dict[str, Any]:
        with self._lock:
            return dict(self._info)

    def is_empty(self) -> bool:
        with self._lock:
            return not self._info

    def set_info(self, info: dict[str, Any]) -> None:
        with self._lock:
            self._info = dict(info)
            snapshot = dict(self._info)
        self.infoChanged.emit(snapshot)

    def update(self, **fields: Any) -> bool:
        # a cleared surface stays cleared until the next set_info()
        with self._lock:
            if not self._info:
                return False
            self._info.update(fields)
            snapshot = dict(self._info)
        self.infoChanged.emit(snapshot)
        return True

    def clear(self) -> None:
        with self._lock:
            if not self._info:
                return
            self._info = {}
        self.infoChanged.emit({})

    # ----------------------------
    # Remote commands
    # ----------------------------

    def add_target(self, command: RemoteCommand, handler: CommandHandler) -> None:
        with self._lock:
            self._targets[command] = handler

    def remove_target(self, command: RemoteCommand) -> None:
        with self._lock:
            self._targets.pop(command, None)

    def remove_all_targets(self) -> None:
        with self._lock:
            self._targets.clear()

    def has_target(self, command: RemoteCommand) -> bool:
        with self._lock:
            return command in self._targets

    def dispatch(self, command: RemoteCommand, **kwargs: Any) -> CommandStatus:
        with self._lock:
            handler = self._targets.get(command)
        if handler is None:
            return CommandStatus.NO_HANDLER

        try:
            status = handler(**kwargs)
        except Exception:
            logger.exception("Remote command %s failed", command.name)
            return CommandStatus.COMMAND_FAILED

        return status if isinstance(status, CommandStatus) else CommandStatus.SUCCESS
