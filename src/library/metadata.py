# src/library/metadata.py
from __future__ import annotations

import base64
import logging
import os
from typing import Optional

from mutagen import File as MutagenFile
from mutagen.flac import Picture
from PySide6.QtGui import QImage

from core.models import TrackMetadata

logger = logging.getLogger(__name__)

# easy keys first, then raw ID3 frames / MP4 atoms
TITLE_KEYS = ("title", "TIT2", "\xa9nam")
ARTIST_KEYS = ("artist", "TPE1", "\xa9ART")


def _text(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        if not value:
            return None
        value = value[0]
    # ID3 frames stringify to their text
    s = str(value).strip()
    return s or None


def _first(tags, keys: tuple[str, ...]) -> str | None:
    if not tags:
        return None
    for key in keys:
        try:
            v = tags.get(key)
        except (KeyError, ValueError):
            continue
        s = _text(v)
        if s:
            return s
    return None


def _picture_bytes(audio) -> bytes | None:
    """
    Return the first embedded picture of a mutagen file object, if any.
      - MP3/WAV/AIFF: ID3 APIC frames
      - MP4/M4A: 'covr' atom
      - FLAC: audio.pictures
      - Ogg: base64 METADATA_BLOCK_PICTURE comment
    """
    tags = getattr(audio, "tags", None)

    if tags is not None and hasattr(tags, "getall"):
        apic = tags.getall("APIC")
        if apic:
            return bytes(apic[0].data)

    if tags is not None:
        try:
            covr = tags.get("covr")
        except (KeyError, ValueError):
            covr = None
        if covr:
            return bytes(covr[0])

    pictures = getattr(audio, "pictures", None)
    if pictures:
        return bytes(pictures[0].data)

    if tags is not None:
        try:
            blocks = tags.get("metadata_block_picture")
        except (KeyError, ValueError):
            blocks = None
        if blocks:
            return Picture(base64.b64decode(blocks[0])).data

    return None


def _decode_image(data: bytes | None) -> Optional[QImage]:
    if not data:
        return None
    image = QImage.fromData(data)
    if image.isNull():
        return None
    return image


def _open(path: str, easy: bool):
    if not path or not os.path.isfile(path):
        return None
    return MutagenFile(path, easy=easy)


def extract_metadata(path: str) -> TrackMetadata:
    """
    Best-effort read of title/artist/artwork from an audio file's tags.
    Never raises: anything unreadable comes back as empty fields.
    """
    try:
        audio = _open(path, easy=True)
        if audio is None:
            return TrackMetadata()

        title = _first(audio, TITLE_KEYS) or _first(getattr(audio, "tags", None), TITLE_KEYS)
        artist = _first(audio, ARTIST_KEYS) or _first(getattr(audio, "tags", None), ARTIST_KEYS)

        # easy wrappers hide APIC/covr, so artwork needs the raw tags
        raw = _open(path, easy=False)
        artwork = _decode_image(_picture_bytes(raw)) if raw is not None else None

        return TrackMetadata(title=title, artist=artist, artwork=artwork)
    except Exception as e:
        logger.debug("Metadata extraction failed for %s: %s", path, e)
        return TrackMetadata()


def extract_artwork(path: str) -> Optional[QImage]:
    try:
        raw = _open(path, easy=False)
        if raw is None:
            return None
        return _decode_image(_picture_bytes(raw))
    except Exception as e:
        logger.debug("Artwork extraction failed for %s: %s", path, e)
        return None
