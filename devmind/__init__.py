"""DevMind: import browser bookmarks and categorise them with a classification service."""

__version__ = "0.1.0"
