# src/library/catalog.py
from __future__ import annotations

import json
import logging
import os
from typing import Callable, Iterable, Iterator, Optional

from PySide6.QtCore import QByteArray, QObject, QSettings, Signal

from core.models import Track, TrackMetadata, TrackRecord
from library.metadata import extract_artwork, extract_metadata
from library.storage import stage_file

logger = logging.getLogger(__name__)

TRACKS_KEY = "savedTracks"


class TrackCatalog(QObject):
    """
    Ordered in-memory list of imported tracks, persisted as one JSON array
    in a key-value store. List order is the library's display order.
    """

    tracksChanged = Signal()

    def __init__(
        self,
        settings: QSettings,
        media_dir: str,
        extractor: Callable[[str], TrackMetadata] = extract_metadata,
        artwork_loader: Callable[[str], object] = extract_artwork,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.settings = settings
        self.media_dir = media_dir
        self._extract = extractor
        self._load_artwork = artwork_loader
        self._tracks: list[Track] = []

    # ----------------------------
    # Queries
    # ----------------------------

    def tracks(self) -> list[Track]:
        return list(self._tracks)

    def __len__(self) -> int:
        return len(self._tracks)

    def __getitem__(self, index: int) -> Track:
        return self._tracks[index]

    def __iter__(self) -> Iterator[Track]:
        return iter(list(self._tracks))

    def find(self, track: Track) -> int:
        for i, t in enumerate(self._tracks):
            if t == track:
                return i
        return -1

    def track_for_path(self, path: str) -> Track | None:
        i = self.find(Track(path=path))
        return self._tracks[i] if i >= 0 else None

    # ----------------------------
    # Mutations
    # ----------------------------

    def import_files(self, candidate_paths: Iterable[str]) -> list[Track]:
        added: list[Track] = []

        for src in candidate_paths:
            try:
                staged = stage_file(src, self.media_dir)
            except OSError as e:
                logger.warning("Failed to copy %s into library: %s", src, e)
                continue

            meta = self._extract(staged)
            track = Track(
                path=staged,
                title=meta.title or os.path.basename(staged),
                artist=meta.artist or "",
                artwork=meta.artwork,
            )
            if track in self._tracks:
                logger.debug("Skipping duplicate %s", staged)
                continue

            self._tracks.append(track)
            added.append(track)

        self.save()
        if added:
            self.tracksChanged.emit()
        return added

    def delete(self, indices: Iterable[int]) -> None:
        positions = sorted(set(int(i) for i in indices), reverse=True)
        count = len(self._tracks)
        for i in positions:
            if i < 0 or i >= count:
                raise IndexError(f"Track index out of range: {i}")

        for i in positions:
            del self._tracks[i]

        self.save()
        self.tracksChanged.emit()

    # ----------------------------
    # Persistence
    # ----------------------------

    def save(self) -> None:
        payload = [t.to_record().to_dict() for t in self._tracks]
        self.settings.setValue(TRACKS_KEY, json.dumps(payload, ensure_ascii=False))
        self.settings.sync()

    def load(self) -> list[Track]:
        self._tracks = [
            Track.from_record(record, artwork=self._load_artwork(record.url))
            for record in self._read_records()
        ]
        self.tracksChanged.emit()
        return self.tracks()

    def _read_records(self) -> list[TrackRecord]:
        raw = self.settings.value(TRACKS_KEY, None)
        if raw is None or raw == "":
            return []

        if isinstance(raw, QByteArray):
            raw = bytes(raw)
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode("utf-8", errors="replace")

        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning("Ignoring unreadable %s value: %s", TRACKS_KEY, e)
            return []

        if not isinstance(data, list):
            logger.warning("Ignoring %s: expected a JSON array", TRACKS_KEY)
            return []

        records: list[TrackRecord] = []
        for entry in data:
            try:
                records.append(TrackRecord.from_dict(entry))
            except ValueError as e:
                logger.warning("Skipping persisted track: %s", e)
        return records
