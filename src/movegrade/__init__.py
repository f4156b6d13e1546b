"""Chess game analysis pipeline: engine orchestration, move grading and scheduling."""

__version__ = "0.1.0"
