"""Single-user to-do list: task store with whole-file JSON persistence."""

__version__ = "0.1.0"
