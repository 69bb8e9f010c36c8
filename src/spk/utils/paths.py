"""Workspace directory management for per-audio-item records."""

from __future__ import annotations

import hashlib
import os
import re
import tempfile
from pathlib import Path


def slugify(text: str) -> str:
    """Convert text to a filesystem-safe slug."""
    text = text.lower().strip()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_]+", "-", text)
    text = re.sub(r"-+", "-", text)
    return text[:80].strip("-")


def item_id(audio_path: Path) -> str:
    """Stable id for an audio item: slug of its name plus a short path hash.

    Uses the resolved path only, so re-encoding the file in place keeps
    its annotations.
    """
    resolved = Path(audio_path).resolve()
    digest = hashlib.sha256(str(resolved).encode()).hexdigest()[:8]
    return f"{slugify(resolved.stem) or 'untitled'}-{digest}"


def write_text_atomic(path: Path, text: str) -> Path:
    """Write text via a temp file in the same directory, then rename over path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
    return path
