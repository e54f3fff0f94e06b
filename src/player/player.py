# src/player/player.py
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum, auto
from functools import partial
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer, Signal
from PySide6.QtGui import QImage

from core.utils import clamp
from .backend import SourceOpenError, open_qt_backend
from .now_playing import (
    ARTIST, ARTWORK, DURATION, ELAPSED, RATE, TITLE,
    CommandStatus, NowPlayingCenter, RemoteCommand,
)

logger = logging.getLogger(__name__)

SYNC_INTERVAL_MS = 1000


class PlayerStatus(Enum):
    STOPPED = auto()
    PLAYING = auto()
    PAUSED = auto()


class PlaybackError(Exception):
    """play() could not open the requested source. No session is active afterwards."""


@dataclass(frozen=True)
class NowPlaying:
    path: str
    title: str
    artist: str
    artwork: Optional[QImage] = None


class PlaybackSession(QObject):
    """
    A single live playback: the decoder handle, the metadata snapshot and
    the repeating surface-sync timer. close() is the only way out and it
    always stops the timer before releasing the decoder.
    """

    def __init__(self, backend, track: NowPlaying, on_tick: Callable[["PlaybackSession"], None],
                 interval_ms: int = SYNC_INTERVAL_MS, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.backend = backend
        self.track = track
        self.ended = False
        self._on_tick = on_tick

        self.sync_timer = QTimer(self)
        self.sync_timer.setInterval(interval_ms)
        self.sync_timer.timeout.connect(self._on_timeout)

    def start_sync(self) -> None:
        self.sync_timer.start()

    def _on_timeout(self) -> None:
        if not self.ended:
            self._on_tick(self)

    def position_ms(self) -> int:
        return self.backend.position_ms() if self.backend is not None else 0

    def duration_ms(self) -> int:
        return self.backend.duration_ms() if self.backend is not None else 0

    def close(self) -> None:
        if self.ended:
            return
        self.ended = True
        self.sync_timer.stop()

        backend, self.backend = self.backend, None
        if backend is not None:
            backend.stop()
            backend.release()


class Player(QObject):
    statusChanged = Signal(object)      # PlayerStatus
    trackChanged = Signal(object)       # NowPlaying | None
    positionChanged = Signal(int)       # ms
    durationChanged = Signal(int)       # ms
    playbackFailed = Signal(str)

    def __init__(self, now_playing: NowPlayingCenter, backend_factory=open_qt_backend,
                 sync_interval_ms: int = SYNC_INTERVAL_MS, parent: Optional[QObject] = None):
        super().__init__(parent)

        self.now_playing = now_playing
        self.status = PlayerStatus.STOPPED
        self.track: NowPlaying | None = None

        self._backend_factory = backend_factory
        self._sync_interval_ms = sync_interval_ms
        self._session: PlaybackSession | None = None
        self._volume_0_to_1: float = 0.7

        # remote commands can arrive off the UI thread
        self._lock = threading.RLock()

        self._register_remote_commands()

    # ----------------------------
    # Remote commands
    # ----------------------------

    def _register_remote_commands(self) -> None:
        self.now_playing.add_target(RemoteCommand.PLAY, self._remote_play)
        self.now_playing.add_target(RemoteCommand.PAUSE, self._remote_pause)
        self.now_playing.add_target(RemoteCommand.TOGGLE_PLAY_PAUSE, self._remote_toggle)
        self.now_playing.add_target(RemoteCommand.CHANGE_PLAYBACK_POSITION, self._remote_seek)

    def _remote_play(self) -> CommandStatus:
        self.resume()
        return CommandStatus.SUCCESS

    def _remote_pause(self) -> CommandStatus:
        self.pause()
        return CommandStatus.SUCCESS

    def _remote_toggle(self) -> CommandStatus:
        self.toggle_play_pause()
        return CommandStatus.SUCCESS

    def _remote_seek(self, position: float | None = None) -> CommandStatus:
        if position is None:
            return CommandStatus.COMMAND_FAILED
        try:
            seconds = float(position)
        except (TypeError, ValueError):
            return CommandStatus.COMMAND_FAILED
        if not self.seek(seconds):
            return CommandStatus.COMMAND_FAILED
        return CommandStatus.SUCCESS

    # ----------------------------
    # Shared helpers
    # ----------------------------

    def _set_status(self, new_status: PlayerStatus) -> None:
        if self.status != new_status:
            logger.debug("Player status %s -> %s", self.status.name, new_status.name)
            self.status = new_status
            self.statusChanged.emit(self.status)

    def _rate(self) -> float:
        return 1.0 if self.status == PlayerStatus.PLAYING else 0.0

    def _push_full_info(self, session: PlaybackSession) -> None:
        info = {
            TITLE: session.track.title,
            ARTIST: session.track.artist,
            DURATION: session.duration_ms() / 1000.0,
            ELAPSED: session.position_ms() / 1000.0,
            RATE: self._rate(),
        }
        if session.track.artwork is not None:
            info[ARTWORK] = session.track.artwork
        self.now_playing.set_info(info)

    def _push_playback_state(self, session: PlaybackSession) -> None:
        self.now_playing.update(**{
            ELAPSED: session.position_ms() / 1000.0,
            RATE: self._rate(),
        })

    def _sync_tick(self, session: PlaybackSession) -> None:
        with self._lock:
            if session is not self._session or session.ended:
                return
            self._push_playback_state(session)

    def _close_session(self) -> bool:
        session, self._session = self._session, None
        if session is None:
            return False
        session.close()
        session.deleteLater()
        return True

    def _end_playback(self) -> None:
        """Cleanup shared by stop, natural completion and playback errors."""
        self._close_session()
        self.now_playing.clear()
        self._set_status(PlayerStatus.STOPPED)
        if self.track is not None:
            self.track = None
            self.trackChanged.emit(None)

    # ----------------------------
    # Backend events
    # ----------------------------

    def _on_backend_finished(self, session: PlaybackSession) -> None:
        with self._lock:
            if session is not self._session:
                return
            logger.debug("Playback finished: %s", session.track.path)
            self._end_playback()

    def _on_backend_failed(self, session: PlaybackSession, message: str) -> None:
        with self._lock:
            if session is not self._session:
                return
            logger.error("Playback error for %s: %s", session.track.path, message)
            self._end_playback()
        self.playbackFailed.emit(message)

    def _on_backend_position(self, session: PlaybackSession, ms: int) -> None:
        if session is self._session:
            self.positionChanged.emit(int(ms))

    def _on_backend_duration(self, session: PlaybackSession, ms: int) -> None:
        if session is not self._session:
            return
        self.durationChanged.emit(int(ms))
        self.now_playing.update(**{DURATION: int(ms) / 1000.0})

    # ----------------------------
    # Public API
    # ----------------------------

    def play(self, path: str, title: str = "", artist: str = "", artwork: QImage | None = None) -> NowPlaying:
        with self._lock:
            # the previous session goes away even if the new source fails to open
            self._close_session()

            try:
                backend = self._backend_factory(path, volume=self._volume_0_to_1)
            except (SourceOpenError, OSError) as e:
                logger.error("Cannot play %s: %s", path, e)
                self._end_playback()
                self.playbackFailed.emit(str(e))
                raise PlaybackError(str(e)) from e

            meta = NowPlaying(path=path, title=title, artist=artist, artwork=artwork)
            session = PlaybackSession(backend, meta, self._sync_tick, self._sync_interval_ms, parent=self)

            backend.finished.connect(partial(self._on_backend_finished, session))
            backend.failed.connect(partial(self._on_backend_failed, session))
            backend.positionChanged.connect(partial(self._on_backend_position, session))
            backend.durationChanged.connect(partial(self._on_backend_duration, session))

            self._session = session
            backend.play()

            self.track = meta
            self.trackChanged.emit(self.track)
            self._set_status(PlayerStatus.PLAYING)

            self._push_full_info(session)
            session.start_sync()
            logger.info("Playing %s", path)
            return meta

    def pause(self) -> None:
        with self._lock:
            session = self._session
            if session is None:
                return
            session.backend.pause()
            self._set_status(PlayerStatus.PAUSED)
            self._push_playback_state(session)

    def resume(self) -> None:
        with self._lock:
            session = self._session
            if session is None:
                return
            session.backend.play()
            self._set_status(PlayerStatus.PLAYING)
            self._push_playback_state(session)

    def toggle_play_pause(self) -> None:
        with self._lock:
            if self.status == PlayerStatus.PLAYING:
                self.pause()
            else:
                self.resume()

    def stop(self) -> None:
        with self._lock:
            if self._session is None:
                return
            logger.debug("Stopping %s", self._session.track.path)
            self._end_playback()

    def seek_ms(self, ms: int) -> bool:
        with self._lock:
            session = self._session
            if session is None:
                return False

            ms = max(0, int(ms))
            duration = session.duration_ms()
            if duration > 0:
                ms = min(ms, duration)

            session.backend.set_position(ms)
            self.now_playing.update(**{ELAPSED: ms / 1000.0, RATE: self._rate()})
            return True

    def seek(self, seconds: float) -> bool:
        return self.seek_ms(int(round(float(seconds) * 1000)))

    def set_volume(self, volume_0_to_1: float) -> None:
        v = clamp(float(volume_0_to_1), 0.0, 1.0)
        with self._lock:
            self._volume_0_to_1 = v
            if self._session is not None:
                self._session.backend.set_volume(v)

    def shutdown(self) -> None:
        self.stop()
        self.now_playing.remove_all_targets()

    # convenient getters for UI
    @property
    def is_playing(self) -> bool:
        return self.status == PlayerStatus.PLAYING

    @property
    def has_session(self) -> bool:
        return self._session is not None

    @property
    def session(self) -> PlaybackSession | None:
        return self._session

    def volume(self) -> float:
        return self._volume_0_to_1

    def position_ms(self) -> int:
        session = self._session
        return session.position_ms() if session is not None else 0

    def duration_ms(self) -> int:
        session = self._session
        return session.duration_ms() if session is not None else 0
