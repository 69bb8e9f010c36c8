"""Playback engine backed by mpv (audio only)."""

from __future__ import annotations

import shutil
from pathlib import Path

from spk.player.engine import PlaybackError


def check_mpv() -> bool:
    """Check if mpv is available on the system."""
    return shutil.which("mpv") is not None


class MpvEngine:
    """Drive a headless mpv instance through the PlaybackEngine contract."""

    def __init__(self, load_timeout: float = 10.0):
        if not check_mpv():
            raise FileNotFoundError("mpv not found. Install it with: brew install mpv")

        try:
            import mpv
        except ImportError:
            raise ImportError("python-mpv is not installed. Install with: uv sync --extra player")

        self._mpv = mpv
        self._load_timeout = load_timeout
        # keep-open holds the last frame at EOF so time-pos stays readable
        self._player = mpv.MPV(video=False, keep_open="yes", pause=True)

    @property
    def is_playing(self) -> bool:
        return not self._player.pause

    def load(self, path: Path) -> float:
        try:
            self._player.pause = True
            self._player.play(str(path))
            self._player.wait_for_property("duration", timeout=self._load_timeout)
            duration = self._player.duration
        except (self._mpv.ShutdownError, TimeoutError) as e:
            raise PlaybackError(f"Failed to load audio: {path.name} ({e})") from e
        if duration is None:
            raise PlaybackError(f"Failed to load audio: {path.name} (unknown duration)")
        return float(duration)

    def seek(self, position: float) -> None:
        self._command(self._player.seek, position, reference="absolute", precision="exact")

    def play(self) -> None:
        self._set_pause(False)

    def pause(self) -> None:
        self._set_pause(True)

    def stop(self) -> None:
        self._set_pause(True)
        self.seek(0.0)

    def position(self) -> float:
        try:
            return float(self._player.time_pos or 0.0)
        except self._mpv.ShutdownError as e:
            raise PlaybackError("mpv shut down during playback") from e

    def close(self) -> None:
        self._player.terminate()

    def _set_pause(self, value: bool) -> None:
        try:
            self._player.pause = value
        except self._mpv.ShutdownError as e:
            raise PlaybackError("mpv shut down during playback") from e

    def _command(self, fn, *args, **kwargs) -> None:
        try:
            fn(*args, **kwargs)
        except (self._mpv.ShutdownError, SystemError) as e:
            raise PlaybackError(f"mpv command failed: {e}") from e
