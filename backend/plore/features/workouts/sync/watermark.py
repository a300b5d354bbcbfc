"""
Sync watermark storage.

The watermark is the timestamp of the last successfully committed sync
pass. It lives in a single key-value slot and never moves backwards.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from plore.shared.constants import SYNC_WATERMARK_KEY
from plore.shared.timeutils import as_utc, parse_iso
from ..repository import KeyValueRepository

logger = logging.getLogger(__name__)


class SyncWatermarkStore:
    """Reads and advances the persisted sync watermark."""

    def __init__(self, db: AsyncSession, key: str = SYNC_WATERMARK_KEY):
        self.db = db
        self.key = key
        self._repo = KeyValueRepository(db)

    async def get(self) -> Optional[datetime]:
        """Last committed sync time, or None if never synced."""
        value = await self._repo.get_value(self.key)
        if not value:
            return None
        try:
            return parse_iso(value)
        except ValueError:
            logger.warning(f"Ignoring unparsable watermark {value!r}")
            return None

    async def advance(self, value: datetime) -> datetime:
        """
        Move the watermark forward and commit.

        A value older than the stored one leaves the watermark unchanged.

        Returns:
            The watermark in effect after the call
        """
        value = as_utc(value)
        current = await self.get()
        if current is not None and value <= current:
            return current

        await self._repo.set_value(self.key, value.isoformat())
        await self.db.commit()
        logger.info(f"Sync watermark advanced to {value.isoformat()}")
        return value
