"""
Core cache data structures.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


@dataclass
class CacheEntry:
    """
    A cached snapshot with an optional TTL.
    ttl_seconds=None means the entry never expires.
    """
    data: Any
    fetched_at: datetime
    ttl_seconds: Optional[int] = None

    @property
    def age_seconds(self) -> float:
        """Seconds since data was fetched."""
        return (datetime.utcnow() - self.fetched_at).total_seconds()

    @property
    def is_fresh(self) -> bool:
        """Check if data is within its TTL."""
        if self.ttl_seconds is None:
            return True
        return self.age_seconds < self.ttl_seconds
