"""Database module for SQLite persistence.

Provides:
- Database connection management
- Schema initialization
- Repository functions for the user_levels table
"""

from lingoxp.db.database import get_db, init_db

__all__ = ["get_db", "init_db"]
