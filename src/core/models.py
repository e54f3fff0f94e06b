# core/models.py
from __future__ import annotations

import os
import uuid
from dataclasses import dataclass, field
from typing import Any, Optional

from PySide6.QtGui import QImage


def _new_track_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class TrackMetadata:
    title: Optional[str] = None
    artist: Optional[str] = None
    artwork: Optional[QImage] = None


@dataclass(frozen=True)
class TrackRecord:
    """Persisted subset of a Track (artwork and id are re-derived on load)."""
    url: str
    title: str
    artist: str

    def to_dict(self) -> dict[str, str]:
        return {"url": self.url, "title": self.title, "artist": self.artist}

    @staticmethod
    def from_dict(d: Any) -> "TrackRecord":
        if not isinstance(d, dict) or not d.get("url"):
            raise ValueError(f"Invalid track record: {d!r}")
        url = str(d["url"])
        title = d.get("title")
        artist = d.get("artist")
        return TrackRecord(
            url=url,
            title=str(title) if title is not None else os.path.basename(url),
            artist=str(artist) if artist is not None else "",
        )


@dataclass(frozen=True)
class Track:
    # equality/hash only look at `path`; each construction mints a new id
    path: str
    title: str = field(default="", compare=False)
    artist: str = field(default="", compare=False)
    artwork: Optional[QImage] = field(default=None, compare=False, repr=False)
    track_id: str = field(default_factory=_new_track_id, compare=False)

    def to_record(self) -> TrackRecord:
        return TrackRecord(url=self.path, title=self.title, artist=self.artist)

    @staticmethod
    def from_record(record: TrackRecord, artwork: Optional[QImage] = None) -> "Track":
        return Track(path=record.url, title=record.title, artist=record.artist, artwork=artwork)
