# src/player/backend.py
from __future__ import annotations

import logging
import os
from typing import Optional

from mutagen import File as MutagenFile
from mutagen import MutagenError
from PySide6.QtCore import QObject, QUrl, Signal
from PySide6.QtMultimedia import QAudioOutput, QMediaPlayer

logger = logging.getLogger(__name__)


class SourceOpenError(Exception):
    """The file cannot be opened as a decodable audio resource."""


def check_source(path: str) -> None:
    """
    Synchronous open check. QMediaPlayer only reports bad sources later
    through errorOccurred, so a file that mutagen can't recognise as audio
    is rejected up front.
    """
    if not path or not os.path.isfile(path):
        raise SourceOpenError(f"File not found: {path}")
    try:
        audio = MutagenFile(path)
    except (MutagenError, OSError) as e:
        raise SourceOpenError(f"Cannot read {path}: {e}") from e
    if audio is None:
        raise SourceOpenError(f"Not a recognised audio file: {path}")


class QtAudioBackend(QObject):
    """
    One decoded-audio handle. Owned by a single playback session and
    released when that session ends.
    """

    positionChanged = Signal(int)   # ms
    durationChanged = Signal(int)   # ms
    finished = Signal()
    failed = Signal(str)

    def __init__(self, path: str, volume: float = 1.0, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.path = path

        self.audio = QAudioOutput(self)
        self.audio.setVolume(float(volume))
        self.media = QMediaPlayer(self)
        self.media.setAudioOutput(self.audio)

        self.media.positionChanged.connect(self._on_position)
        self.media.durationChanged.connect(self._on_duration)
        self.media.mediaStatusChanged.connect(self._on_media_status)
        self.media.errorOccurred.connect(self._on_error)

        self.media.setSource(QUrl.fromLocalFile(path))

    # ----------------------------
    # Qt handlers
    # ----------------------------

    def _on_position(self, ms) -> None:
        self.positionChanged.emit(int(ms))

    def _on_duration(self, ms) -> None:
        self.durationChanged.emit(int(ms))

    def _on_media_status(self, status: QMediaPlayer.MediaStatus) -> None:
        if status == QMediaPlayer.MediaStatus.EndOfMedia:
            self.finished.emit()
        elif status == QMediaPlayer.MediaStatus.InvalidMedia:
            self.failed.emit(f"Invalid media: {self.path}")

    def _on_error(self, error: QMediaPlayer.Error, message: str) -> None:
        if error == QMediaPlayer.Error.NoError:
            return
        self.failed.emit(message or str(error))

    # ----------------------------
    # Transport
    # ----------------------------

    def play(self) -> None:
        self.media.play()

    def pause(self) -> None:
        self.media.pause()

    def stop(self) -> None:
        self.media.stop()

    def set_position(self, ms: int) -> None:
        self.media.setPosition(int(ms))

    def position_ms(self) -> int:
        return int(self.media.position())

    def duration_ms(self) -> int:
        return int(self.media.duration())

    def set_volume(self, volume_0_to_1: float) -> None:
        self.audio.setVolume(float(volume_0_to_1))

    def release(self) -> None:
        self.media.positionChanged.disconnect(self._on_position)
        self.media.durationChanged.disconnect(self._on_duration)
        self.media.mediaStatusChanged.disconnect(self._on_media_status)
        self.media.errorOccurred.disconnect(self._on_error)
        self.media.stop()
        self.media.setSource(QUrl())
        self.deleteLater()


def open_qt_backend(path: str, volume: float = 1.0) -> QtAudioBackend:
    check_source(path)
    return QtAudioBackend(path, volume=volume)
