# src/library/storage.py
from __future__ import annotations

import hashlib
import logging
import os
import shutil
import tempfile

logger = logging.getLogger(__name__)

AUDIO_EXTS = {".mp3", ".m4a", ".mp4", ".aac", ".aif", ".aiff", ".wav"}

FILE_DIALOG_FILTER = (
    "Audio files (" + " ".join(f"*{ext}" for ext in sorted(AUDIO_EXTS)) + ");;All files (*)"
)


def is_audio_path(path: str) -> bool:
    return os.path.splitext(path)[1].lower() in AUDIO_EXTS


def _is_inside(path: str, directory: str) -> bool:
    path = os.path.realpath(path)
    directory = os.path.realpath(directory)
    return os.path.commonpath([path, directory]) == directory


def staged_path_for(src: str, media_dir: str) -> str:
    """media_dir/<hash of the absolute source path>/<basename>"""
    src = os.path.abspath(src)
    bucket = hashlib.sha1(src.encode("utf-8", errors="surrogateescape")).hexdigest()[:12]
    return os.path.join(media_dir, bucket, os.path.basename(src))


def _copy_atomic(src: str, dest: str) -> None:
    dest_dir = os.path.dirname(dest)
    fd, tmp = tempfile.mkstemp(prefix=".import-", suffix=".part", dir=dest_dir)
    os.close(fd)
    try:
        shutil.copy2(src, tmp)
        os.replace(tmp, dest)
    except BaseException:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise


def stage_file(src: str, media_dir: str) -> str:
    """
    Make sure `src` lives inside `media_dir` and return the staged path.

    The staged location depends only on the absolute source path, so the
    same path always maps to the same entry and equal basenames from
    different folders never collide.

    - already inside media_dir -> returned as-is
    - already staged -> reused
    - otherwise copied (temp file + rename, so a failed copy leaves nothing)

    Raises OSError when the copy fails.
    """
    src = os.path.abspath(src)
    os.makedirs(media_dir, exist_ok=True)

    if _is_inside(src, media_dir):
        return src

    dest = staged_path_for(src, media_dir)
    if os.path.isfile(dest):
        return dest

    os.makedirs(os.path.dirname(dest), exist_ok=True)
    _copy_atomic(src, dest)
    logger.debug("Copied %s -> %s", src, dest)
    return dest
