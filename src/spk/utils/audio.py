"""Short audio clips via ffmpeg."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path


def check_ffmpeg() -> bool:
    """Check if ffmpeg is available on the system."""
    return shutil.which("ffmpeg") is not None


def extract_clip(
    audio_path: Path,
    output_path: Path,
    duration: float,
    start: float = 0.0,
    sample_rate: int = 16000,
) -> Path:
    """Cut ``duration`` seconds from ``start`` into a mono 16-bit WAV.

    Raises:
        FileNotFoundError: If ffmpeg is not installed or the audio doesn't exist.
        subprocess.CalledProcessError: If ffmpeg fails.
    """
    if not check_ffmpeg():
        raise FileNotFoundError("ffmpeg not found. Install it with: brew install ffmpeg")

    audio_path = Path(audio_path)
    if not audio_path.is_file():
        raise FileNotFoundError(f"Audio file not found: {audio_path}")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    cmd = [
        "ffmpeg",
        "-ss",
        f"{start:.3f}",
        "-i",
        str(audio_path),
        "-t",
        f"{duration:.3f}",
        "-vn",
        "-acodec",
        "pcm_s16le",
        "-ar",
        str(sample_rate),
        "-ac",
        "1",
        "-y",
        str(output_path),
    ]
    result = subprocess.run(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.PIPE)
    if result.returncode != 0:
        stderr_msg = result.stderr.decode(errors="replace").strip()
        raise subprocess.CalledProcessError(result.returncode, cmd, stderr=stderr_msg)
    return output_path
