"""
Create the weather_cache table.

One row per normalized location. Rows are upserted on every successful
provider fetch and read back as fresh or stale fallbacks; this subsystem
never deletes them. The JSON envelope lives in `data`.
"""

from yoyo import step

__depends__ = {"0001_create_profiles"}

steps = [
    step(
        """
        CREATE TABLE IF NOT EXISTS weather_cache (
            cache_key TEXT PRIMARY KEY,
            topic TEXT NOT NULL DEFAULT 'weather',
            location_key TEXT NOT NULL,
            data TEXT NOT NULL,
            fetched_at TEXT NOT NULL
        )
        """,
        "DROP TABLE IF EXISTS weather_cache",
    ),
    step(
        """
        CREATE INDEX IF NOT EXISTS idx_weather_cache_location_key
        ON weather_cache(location_key)
        """,
        "DROP INDEX IF EXISTS idx_weather_cache_location_key",
    ),
]
