from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QLabel, QFileDialog, QToolButton, QStyle
)
from PySide6.QtCore import QStandardPaths
from PySide6.QtGui import QShortcut, QKeySequence
import logging

from library.storage import FILE_DIALOG_FILTER, is_audio_path
from player.player import PlaybackError
from ui.player_bar import PlayerBar
from ui.toast import Toast
from ui.tray import TrayControls
from ui.widgets.library_list_widget import LibraryListWidget

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self, app_state):
        super().__init__()
        self.setWindowTitle("SimplePlayer")
        self.resize(720, 560)
        self.app_state = app_state
        self.catalog = app_state.catalog
        self.player = app_state.player

        self.central_widget = QWidget()
        self.setCentralWidget(self.central_widget)
        self.layout = QVBoxLayout(self.central_widget)

        self.app_state.notification.connect(self._on_notify)

        # --- Top bar ---
        top_bar = QHBoxLayout()
        title = QLabel("Library")
        title.setObjectName("LibraryTitle")
        top_bar.addWidget(title)
        top_bar.addStretch(1)

        self.btn_import = QToolButton()
        self.btn_import.setIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_FileDialogNewFolder))
        self.btn_import.setToolTip("Import audio files")
        self.btn_import.clicked.connect(self.import_files)

        self.btn_delete = QToolButton()
        self.btn_delete.setIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_TrashIcon))
        self.btn_delete.setToolTip("Delete selected tracks")
        self.btn_delete.clicked.connect(lambda: self.delete_rows(self.library_list.selected_rows()))

        top_bar.addWidget(self.btn_import)
        top_bar.addWidget(self.btn_delete)
        self.layout.addLayout(top_bar)

        # --- Library ---
        self.library_list = LibraryListWidget(self.catalog)
        self.library_list.playRequested.connect(self.play_row)
        self.library_list.deleteRequested.connect(self.delete_rows)
        self.layout.addWidget(self.library_list, 1)

        # --- PlayerBar ---
        self.player_bar = PlayerBar(self.player, self)
        self.layout.addWidget(self.player_bar)

        if self.player:
            self.player.trackChanged.connect(self._on_player_track_changed)
            self.player.playbackFailed.connect(self._on_playback_failed)
        self._starting_playback = False

        # --- Tray (OS now-playing surface) ---
        self.tray = None
        if self.app_state.now_playing is not None:
            icon = self.style().standardIcon(QStyle.StandardPixmap.SP_MediaPlay)
            self.tray = TrayControls(self.app_state.now_playing, icon, self)
            self.tray.show()

        # --- Shortcuts ---
        QShortcut(QKeySequence("Ctrl+O"), self, activated=self.import_files)
        QShortcut(QKeySequence("Space"), self, activated=self._toggle_play_pause)
        QShortcut(QKeySequence("Return"), self, activated=self._play_current_row)
        QShortcut(QKeySequence("Enter"), self, activated=self._play_current_row)

        self.show_queued_notifications()

    # ------------------ library actions ------------------
    def import_files(self):
        start_dir = QStandardPaths.writableLocation(QStandardPaths.MusicLocation)
        paths, _ = QFileDialog.getOpenFileNames(self, "Import audio files", start_dir, FILE_DIALOG_FILTER)
        audio = [p for p in paths if is_audio_path(p)]
        if len(audio) < len(paths):
            logger.info("Ignoring %d non-audio file(s)", len(paths) - len(audio))
        if not audio:
            return

        added = self.catalog.import_files(audio)
        skipped = len(audio) - len(added)
        if added:
            self.statusBar().showMessage(f"Imported {len(added)} track(s).", 3000)
        if skipped:
            logger.info("Import skipped %d file(s) (duplicates or copy errors)", skipped)

    def delete_rows(self, rows: list[int]):
        if not rows:
            return

        playing = self.player.track.path if self.player and self.player.track else None
        doomed = {self.catalog[r].path for r in rows if 0 <= r < len(self.catalog)}

        try:
            self.catalog.delete(rows)
        except IndexError as e:
            self.app_state.notify(f"Cannot delete: {e}", "error")
            return

        if playing and playing in doomed:
            self.player.stop()
        self.statusBar().showMessage(f"Deleted {len(doomed)} track(s).", 3000)

    # ------------------ playback ------------------
    def play_row(self, row: int):
        if row < 0 or row >= len(self.catalog):
            return
        if not self.player:
            self.app_state.notify("Audio player is not available.", "error")
            return
        track = self.catalog[row]
        self._starting_playback = True
        try:
            self.player.play(track.path, title=track.title, artist=track.artist, artwork=track.artwork)
        except PlaybackError as e:
            self.app_state.notify(f"Cannot play {track.title}: {e}", "error")
        finally:
            self._starting_playback = False

    def _play_current_row(self):
        row = self.library_list.current_row()
        if row >= 0:
            self.play_row(row)

    def _toggle_play_pause(self):
        if self.player:
            self.player.toggle_play_pause()

    def _on_playback_failed(self, message: str):
        # open errors raised by play() already got a toast in play_row
        if self._starting_playback:
            return
        self.statusBar().showMessage(f"Playback error: {message}", 4000)

    def _on_player_track_changed(self, now_playing):
        self.library_list.set_now_playing(now_playing.path if now_playing else None)

    # ------------------ notifications ------------------
    def show_queued_notifications(self):
        for n in self.app_state.queued_notifications:
            self._on_notify(n)
        self.app_state.queued_notifications.clear()

    def _on_notify(self, n):
        msg = getattr(n, "message", "") or ""
        if not msg:
            return
        kind = (getattr(n, "notify_type", "info") or "info").lower()
        Toast(self, msg, kind=kind, ms=3000).show_bottom_right()

    def closeEvent(self, event):
        if self.tray is not None:
            self.tray.hide()
        self.app_state.shutdown()
        super().closeEvent(event)
