import os
import sys
import wave

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_DIR = os.path.join(ROOT, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtCore import QCoreApplication, QObject, QSettings, Signal  # noqa: E402

from player.backend import SourceOpenError  # noqa: E402
from player.now_playing import NowPlayingCenter  # noqa: E402
from player.player import Player  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


def write_wav(path, seconds: float = 0.1, rate: int = 8000) -> str:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with wave.open(str(path), "wb") as w:
        w.setnchannels(1)
        w.setsampwidth(2)
        w.setframerate(rate)
        w.writeframes(b"\x00\x00" * int(rate * seconds))
    return str(path)


@pytest.fixture
def make_wav():
    return write_wav


@pytest.fixture
def settings(tmp_path, qapp):
    s = QSettings(str(tmp_path / "settings.ini"), QSettings.IniFormat)
    yield s
    s.sync()


class FakeBackend(QObject):
    """Stands in for QtAudioBackend: records transport calls, emits on demand."""

    positionChanged = Signal(int)
    durationChanged = Signal(int)
    finished = Signal()
    failed = Signal(str)

    def __init__(self, path: str, volume: float = 1.0, duration_ms: int = 180_000):
        super().__init__()
        self.path = path
        self.volume = volume
        self.calls: list[str] = []
        self.playing = False
        self.released = False
        self._position = 0
        self._duration = duration_ms

    def play(self):
        self.calls.append("play")
        self.playing = True

    def pause(self):
        self.calls.append("pause")
        self.playing = False

    def stop(self):
        self.calls.append("stop")
        self.playing = False

    def set_position(self, ms):
        self.calls.append(f"seek:{ms}")
        self._position = int(ms)

    def position_ms(self):
        return self._position

    def duration_ms(self):
        return self._duration

    def set_volume(self, v):
        self.volume = v

    def release(self):
        self.released = True


class FakeBackendFactory:
    def __init__(self, fail_paths=()):
        self.fail_paths = set(fail_paths)
        self.created: list[FakeBackend] = []

    def __call__(self, path, volume=1.0):
        if path in self.fail_paths:
            raise SourceOpenError(f"Not a recognised audio file: {path}")
        backend = FakeBackend(path, volume=volume)
        self.created.append(backend)
        return backend


@pytest.fixture
def backend_factory():
    return FakeBackendFactory(fail_paths={"/broken.mp3"})


@pytest.fixture
def now_playing(qapp):
    return NowPlayingCenter()


@pytest.fixture
def player(qapp, now_playing, backend_factory):
    p = Player(now_playing, backend_factory=backend_factory)
    yield p
    p.shutdown()
