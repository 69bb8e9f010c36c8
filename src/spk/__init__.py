"""speakloop: shadowing practice for narrated audio."""

__version__ = "0.3.0"
