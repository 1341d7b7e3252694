"""Video catalogue collection: MacCMS harvesting, play-link parsing, title matching and probing."""

__version__ = "0.1.0"