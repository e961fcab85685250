"""
Player directory
Process-wide cache of every NHL player, loaded from one bulk provider
call and searched in memory
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional, Any

from app.cache import CacheEntry, RequestCoalescer
from app.nhl_client import ProviderError, StatsProvider
from app.schemas import DirectoryEntry
from app.utils.helpers import safe_lower
from config.settings import settings

logger = logging.getLogger("directory")

_DIRECTORY_KEY = "directory:all_players"


def _rank_key(entry: DirectoryEntry, query: str):
    """Exact match first, then prefix, then substring; alphabetical within a tier."""
    name = entry.name.lower()
    if name == query:
        tier = 0
    elif name.startswith(query):
        tier = 1
    else:
        tier = 2
    return (tier, name, entry.id)


def rank_entries(entries: List[DirectoryEntry], query: str) -> List[DirectoryEntry]:
    """Filter entries to case-insensitive substring matches and rank them."""
    needle = safe_lower(query)
    matches = [e for e in entries if needle in e.name.lower()]
    matches.sort(key=lambda e: _rank_key(e, needle))
    return matches


class PlayerDirectory:
    """
    Lazily-populated player directory.

    - First search triggers one bulk fetch; concurrent first callers share it
    - Failed or empty fetches are not cached, the next search retries
    - Kept for the process lifetime unless ttl_seconds is set or refresh() is called
    """

    def __init__(
        self,
        provider: StatsProvider,
        ttl_seconds: Optional[int] = None,
        min_query_length: Optional[int] = None,
    ):
        self._provider = provider
        self._ttl_seconds = ttl_seconds
        self._min_query_length = (
            settings.search_min_length if min_query_length is None else min_query_length
        )
        self._entry: Optional[CacheEntry] = None
        self._coalescer = RequestCoalescer()
        self.bulk_fetches = 0

    def _fetch_all(self) -> Dict[int, DirectoryEntry]:
        """Bulk fetch; stores the snapshot before the in-flight slot is released."""
        entry = self._entry
        if entry is not None and entry.is_fresh:
            return entry.data

        self.bulk_fetches += 1
        players = {p.id: p for p in self._provider.fetch_roster()}
        if players:
            self._entry = CacheEntry(
                data=players,
                fetched_at=datetime.utcnow(),
                ttl_seconds=self._ttl_seconds,
            )
            logger.info(f"Loaded {len(players)} players into the directory")
        return players

    def _load(self) -> Dict[int, DirectoryEntry]:
        """Return the cached mapping, fetching it if missing or expired."""
        entry = self._entry
        if entry is not None and entry.is_fresh:
            return entry.data

        try:
            players = self._coalescer.get_or_fetch(_DIRECTORY_KEY, self._fetch_all)
        except (ProviderError, TimeoutError) as e:
            logger.warning(f"Could not load NHL player directory: {e}")
            return {}

        if not players:
            logger.warning("No players returned from NHL player directory")
        return players

    def search(self, query: str, limit: Optional[int] = None) -> List[DirectoryEntry]:
        """
        Search the directory by name.

        Queries shorter than the minimum length return [] without a fetch.
        """
        needle = safe_lower(query)
        if len(needle) < self._min_query_length:
            return []

        players = self._load()
        if not players:
            return []

        results = rank_entries(list(players.values()), needle)
        if limit is not None:
            results = results[:limit]
        return results

    def get(self, player_id: int) -> Optional[DirectoryEntry]:
        """Look up a player already in the cache (never triggers a fetch)."""
        if self._entry is None:
            return None
        return self._entry.data.get(player_id)

    def refresh(self) -> None:
        """Drop the cached directory; the next search re-fetches it."""
        self._entry = None
        logger.info("Player directory invalidated")

    @property
    def provider(self) -> StatsProvider:
        return self._provider

    @property
    def is_loaded(self) -> bool:
        return self._entry is not None

    def get_stats(self) -> Dict[str, Any]:
        """Directory cache statistics."""
        entry = self._entry
        return {
            "loaded": entry is not None,
            "entries": len(entry.data) if entry else 0,
            "bulk_fetches": self.bulk_fetches,
            "age_seconds": round(entry.age_seconds, 1) if entry else None,
            "ttl_seconds": self._ttl_seconds,
            "in_flight": self._coalescer.active_requests,
        }
