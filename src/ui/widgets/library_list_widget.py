# ui/library_list_widget.py
from __future__ import annotations

from PySide6.QtCore import Signal, Qt, QSize
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import QWidget, QVBoxLayout, QListView, QMenu, QLabel, QStyle, QStackedLayout

from ui.models.track_list_model import TrackListModel, ARTWORK_SIZE

EMPTY_TEXT = "Music you import will show up here (press Import to add files)"


class LibraryListWidget(QWidget):
    playRequested = Signal(int)           # row
    deleteRequested = Signal(list)        # rows

    def __init__(self, catalog, parent=None):
        super().__init__(parent)
        self.catalog = catalog

        fallback = self.style().standardIcon(QStyle.StandardPixmap.SP_MediaVolume)
        self.model = TrackListModel([], fallback_icon=fallback)

        self.view = QListView()
        self.view.setModel(self.model)
        self.view.setObjectName("LibraryList")
        self.view.setIconSize(QSize(ARTWORK_SIZE, ARTWORK_SIZE))
        self.view.setSelectionMode(QListView.SelectionMode.ExtendedSelection)
        self.view.setUniformItemSizes(True)
        self.view.setAlternatingRowColors(True)

        self.view.doubleClicked.connect(lambda idx: self.playRequested.emit(idx.row()))

        self.view.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.view.customContextMenuRequested.connect(self._on_context_menu)

        QShortcut(QKeySequence(QKeySequence.StandardKey.Delete), self.view,
                  activated=self._emit_delete_selected)

        self.empty_label = QLabel(EMPTY_TEXT)
        self.empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.empty_label.setWordWrap(True)
        self.empty_label.setObjectName("EmptyLibrary")

        self._stack = QStackedLayout()
        self._stack.addWidget(self.empty_label)
        self._stack.addWidget(self.view)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addLayout(self._stack)

        self.catalog.tracksChanged.connect(self.refresh)
        self.refresh()

    def refresh(self):
        tracks = self.catalog.tracks()
        self.model.set_tracks(tracks)
        self._stack.setCurrentWidget(self.view if tracks else self.empty_label)

    def selected_rows(self) -> list[int]:
        return sorted(idx.row() for idx in self.view.selectionModel().selectedIndexes())

    def current_row(self) -> int:
        idx = self.view.currentIndex()
        return idx.row() if idx.isValid() else -1

    def set_now_playing(self, path: str | None):
        if not path:
            return
        row = self.model.row_for_path(path)
        if row >= 0:
            self.view.setCurrentIndex(self.model.index(row, 0))

    def _emit_delete_selected(self):
        rows = self.selected_rows()
        if rows:
            self.deleteRequested.emit(rows)

    def _on_context_menu(self, pos):
        idx = self.view.indexAt(pos)
        if not idx.isValid():
            return

        menu = QMenu(self)
        act_play = menu.addAction("Play")
        act_delete = menu.addAction("Delete")

        chosen = menu.exec(self.view.viewport().mapToGlobal(pos))
        if chosen == act_play:
            self.playRequested.emit(idx.row())
        elif chosen == act_delete:
            rows = self.selected_rows() or [idx.row()]
            self.deleteRequested.emit(rows)
