"""XP and leveling service for English learners."""

__version__ = "0.1.0"
