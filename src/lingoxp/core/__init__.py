"""Core business logic.

Modules:
- progress_calculator: XP curve, levels, rewards (pure functions)
- user_level: user level records and their mutations
"""

__all__ = [
    "progress_calculator",
    "user_level",
]
