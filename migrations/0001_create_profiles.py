"""
Create the profiles table.

Profiles hold the sparse address fields a farmer fills in on the marketplace
(village, district, pincode and a free-text location). The weather endpoint
only reads them; provisioning happens elsewhere.
"""

from yoyo import step

steps = [
    step(
        """
        CREATE TABLE IF NOT EXISTS profiles (
            user_id TEXT PRIMARY KEY,
            village TEXT,
            district TEXT,
            pincode TEXT,
            location TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """,
        "DROP TABLE IF EXISTS profiles",
    ),
]
