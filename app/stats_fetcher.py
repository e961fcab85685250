"""
Stats fetcher
Current-season aggregates for one player, normalized into a StatsSnapshot
"""
import logging
from typing import Optional, Union

from app.directory import PlayerDirectory
from app.nhl_client import ProviderError, StatsProvider
from app.schemas import StatsSnapshot
from app.season import current_season

logger = logging.getLogger("stats_fetcher")

UNKNOWN_PLAYER_NAME = "Unknown Player"


class StatsFetcher:
    """
    Fetch a player's current-season totals.

    A missing season block is a valid zero-stats result; transport
    failures and unresolvable names return None.
    """

    def __init__(self, provider: StatsProvider, directory: PlayerDirectory):
        self.provider = provider
        self.directory = directory

    def _resolve_name(self, name: str) -> Optional[int]:
        matches = self.directory.search(name, limit=1)
        if not matches:
            logger.warning(f"No NHL player matches name '{name}'")
            return None
        return matches[0].id

    def fetch(self, identifier: Union[int, str]) -> Optional[StatsSnapshot]:
        """
        Fetch stats by provider id, or by display name (top directory match).

        Returns:
            StatsSnapshot, or None when the player can't be resolved or fetched
        """
        if isinstance(identifier, str):
            player_id = self._resolve_name(identifier)
            if player_id is None:
                return None
        else:
            player_id = identifier

        season = current_season()
        logger.info(f"Fetching stats for player ID: {player_id} for season {season}")

        try:
            line = self.provider.fetch_player_season_stats(player_id, season)
        except ProviderError as e:
            logger.error(f"Error fetching NHL player stats for {player_id}: {e}")
            return None

        directory_entry = self.directory.get(player_id)
        fallback_name = directory_entry.name if directory_entry else UNKNOWN_PLAYER_NAME

        if line is None:
            logger.warning(f"No stats found for player ID: {player_id} for season {season}")
            return StatsSnapshot(player_id=player_id, player_name=fallback_name)

        snapshot = StatsSnapshot(
            player_id=player_id,
            player_name=line.get("name") or fallback_name,
            total_games=line.get("games", 0),
            points=line.get("points", 0),
            shots=line.get("shots", 0),
        )
        logger.info(
            f"Stats for {player_id} - Games: {snapshot.total_games}, "
            f"Points: {snapshot.points}, Shots: {snapshot.shots}"
        )
        return snapshot
