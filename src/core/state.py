from __future__ import annotations
from dataclasses import dataclass
from PySide6.QtCore import QObject, Signal, Slot

@dataclass(frozen=True)
class Notify:
    message: str
    notify_type: str = "info"   # info/success/warn/error

class AppState(QObject):
    notification = Signal(object)   # emits Notify

    def __init__(self):
        super().__init__()
        self.app_data_dir: str | None = None
        self.media_dir: str | None = None
        self.settings = None
        self.catalog = None
        self.now_playing = None
        self.player = None
        self.queued_notifications: list[Notify] = []

    @Slot(str, str)
    def notify(self, message: str, notify_type: str = "info"):
        self.notification.emit(Notify(message=message, notify_type=notify_type))

    def shutdown(self) -> None:
        if self.player is not None:
            self.player.shutdown()
        if self.settings is not None:
            self.settings.sync()
