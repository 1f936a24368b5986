"""Database models package.

Database composes the base (pooling, migrations) with one mixin per table:
profiles (address lookup) and weather_cache.

Usage:
    from src.db.models import Database, db

    address = db.get_address("user-123")
    test_db = Database(tmp_path / "weather.db")
"""

from src.db.models.base import DatabaseBase
from src.db.models.cache import CacheMixin
from src.db.models.helpers import check_database_connectivity
from src.db.models.profile import ProfileMixin


class Database(DatabaseBase, ProfileMixin, CacheMixin):
    """The weather database: profiles and the weather cache."""


# Global database instance
db = Database()

__all__ = [
    "Database",
    "db",
    "check_database_connectivity",
]
