# ui/tray.py
from __future__ import annotations

from PySide6.QtCore import QObject
from PySide6.QtGui import QIcon
from PySide6.QtWidgets import QMenu, QSystemTrayIcon

from player.now_playing import ARTIST, TITLE, RATE, RemoteCommand


class TrayControls(QObject):
    """
    System tray face of the now-playing surface: the tooltip mirrors the
    info dictionary and the menu sends remote commands through dispatch().
    """

    def __init__(self, now_playing, icon: QIcon, parent=None):
        super().__init__(parent)
        self.now_playing = now_playing

        self.menu = QMenu()
        self.act_toggle = self.menu.addAction("Play/Pause")
        self.act_play = self.menu.addAction("Play")
        self.act_pause = self.menu.addAction("Pause")
        self.menu.addSeparator()
        self.act_restart = self.menu.addAction("Restart track")

        self.act_toggle.triggered.connect(lambda: self.now_playing.dispatch(RemoteCommand.TOGGLE_PLAY_PAUSE))
        self.act_play.triggered.connect(lambda: self.now_playing.dispatch(RemoteCommand.PLAY))
        self.act_pause.triggered.connect(lambda: self.now_playing.dispatch(RemoteCommand.PAUSE))
        self.act_restart.triggered.connect(
            lambda: self.now_playing.dispatch(RemoteCommand.CHANGE_PLAYBACK_POSITION, position=0.0)
        )

        self.tray = QSystemTrayIcon(icon, self)
        self.tray.setContextMenu(self.menu)
        self.tray.activated.connect(self._on_activated)

        self.now_playing.infoChanged.connect(self._on_info_changed)
        self._on_info_changed(self.now_playing.info())

    def show(self) -> bool:
        if not QSystemTrayIcon.isSystemTrayAvailable():
            return False
        self.tray.show()
        return True

    def hide(self) -> None:
        self.tray.hide()

    def _on_activated(self, reason):
        if reason == QSystemTrayIcon.ActivationReason.Trigger:
            self.now_playing.dispatch(RemoteCommand.TOGGLE_PLAY_PAUSE)

    def _on_info_changed(self, info: dict):
        has_track = bool(info)
        for act in (self.act_toggle, self.act_play, self.act_pause, self.act_restart):
            act.setEnabled(has_track)

        if not has_track:
            self.tray.setToolTip("SimplePlayer")
            return

        title = info.get(TITLE) or "Unknown"
        artist = info.get(ARTIST) or ""
        state = "Playing" if info.get(RATE) else "Paused"
        line = f"{artist} — {title}" if artist else title
        self.tray.setToolTip(f"{state}: {line}")
