"""Profile database operations mixin.

The weather endpoint only needs the address fields of a profile. Writes exist
for provisioning scripts and tests.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import TYPE_CHECKING, Any

from src.utils.logging import get_logger
from src.weather.models import AddressRecord

if TYPE_CHECKING:
    from src.utils.connection_pool import ConnectionPool

logger = get_logger(__name__)


class ProfileMixin:
    """Mixin providing profile (address) database operations."""

    _pool: ConnectionPool

    def _execute_with_timing(
        self,
        conn: sqlite3.Connection,
        query: str,
        params: tuple[Any, ...] = (),
    ) -> sqlite3.Cursor:
        """Execute query with timing (defined in base class)."""
        raise NotImplementedError

    def get_address(self, user_id: str) -> AddressRecord | None:
        """Get the stored address for a user.

        Args:
            user_id: The caller's user ID

        Returns:
            AddressRecord if a profile exists, None otherwise
        """
        with self._pool.get_connection() as conn:
            row = self._execute_with_timing(
                conn,
                """
                SELECT user_id, village, district, pincode, location
                FROM profiles
                WHERE user_id = ?
                """,
                (user_id,),
            ).fetchone()

        if not row:
            return None

        return AddressRecord(
            user_id=row["user_id"],
            village=row["village"],
            district=row["district"],
            pincode=row["pincode"],
            location=row["location"],
        )

    def upsert_profile(
        self,
        user_id: str,
        village: str | None = None,
        district: str | None = None,
        pincode: str | None = None,
        location: str | None = None,
    ) -> AddressRecord:
        """Create or replace a user's address fields.

        Args:
            user_id: The user ID
            village: Village name
            district: District name
            pincode: Postal code
            location: Free-text location

        Returns:
            The stored AddressRecord
        """
        now = datetime.now().isoformat()
        with self._pool.get_connection() as conn:
            self._execute_with_timing(
                conn,
                """
                INSERT INTO profiles
                (user_id, village, district, pincode, location, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    village = excluded.village,
                    district = excluded.district,
                    pincode = excluded.pincode,
                    location = excluded.location,
                    updated_at = excluded.updated_at
                """,
                (user_id, village, district, pincode, location, now, now),
            )
            conn.commit()

        logger.debug("Profile upserted", extra={"user_id": user_id})
        return AddressRecord(
            user_id=user_id,
            village=village,
            district=district,
            pincode=pincode,
            location=location,
        )
