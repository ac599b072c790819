"""firmwarenator: build a firmware image holding only what the running kernel loaded."""

__version__ = "0.1.0"
