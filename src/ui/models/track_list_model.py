# ui/track_list_model.py
from __future__ import annotations
from PySide6.QtCore import QAbstractListModel, Qt, QModelIndex, QSize
from PySide6.QtGui import QPixmap

from core.models import Track

ARTWORK_SIZE = 48
ArtistRole = Qt.UserRole + 1


class TrackListModel(QAbstractListModel):
    def __init__(self, tracks=(), fallback_icon=None):
        super().__init__()
        self._tracks: list[Track] = list(tracks)
        self._fallback_icon = fallback_icon
        self._pixmaps: dict[str, QPixmap] = {}

    def set_tracks(self, tracks):
        self.beginResetModel()
        self._tracks = list(tracks)
        self._pixmaps.clear()
        self.endResetModel()

    def rowCount(self, parent=QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(self._tracks)

    def data(self, index: QModelIndex, role=Qt.DisplayRole):
        if not index.isValid() or index.row() >= len(self._tracks):
            return None
        track = self._tracks[index.row()]

        if role == Qt.DisplayRole:
            return f"{track.title}\n{track.artist}" if track.artist else track.title
        if role == Qt.ToolTipRole:
            return track.path
        if role == Qt.DecorationRole:
            return self._artwork(track)
        if role == Qt.SizeHintRole:
            return QSize(0, ARTWORK_SIZE + 8)
        if role == ArtistRole:
            return track.artist
        if role == Qt.UserRole:
            return track
        return None

    def _artwork(self, track: Track):
        if track.artwork is None:
            return self._fallback_icon
        pm = self._pixmaps.get(track.track_id)
        if pm is None:
            pm = QPixmap.fromImage(track.artwork).scaled(
                ARTWORK_SIZE, ARTWORK_SIZE,
                Qt.AspectRatioMode.KeepAspectRatioByExpanding,
                Qt.TransformationMode.SmoothTransformation,
            )
            self._pixmaps[track.track_id] = pm
        return pm

    def row_for_path(self, path: str) -> int:
        for i, t in enumerate(self._tracks):
            if t.path == path:
                return i
        return -1
