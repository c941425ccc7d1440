"""logdeck: terminal console for administering a distributed message log."""

__version__ = "0.1.0"
