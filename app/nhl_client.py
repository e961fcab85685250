"""
NHL API client
Provider adapters that turn the NHL endpoints into directory entries
and normalized season stat lines
"""
import logging
from typing import Protocol, Optional, List, Dict, Any

import requests
from dotenv import load_dotenv

from app.schemas import DirectoryEntry
from app.utils.helpers import safe_int, safe_strip
from config.settings import settings

load_dotenv()

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger("nhl_client")


class ProviderError(Exception):
    """Network failure, non-success status or malformed payload from the NHL API."""


# Raised when a decoded payload has the wrong structure
_SHAPE_ERRORS = (AttributeError, KeyError, TypeError, IndexError)


def _get_json(url: str, params: Optional[dict] = None) -> Any:
    """
    GET a JSON document.

    Raises:
        ProviderError: on any transport, status or decoding failure
    """
    try:
        response = requests.get(url, params=params, timeout=settings.request_timeout)
        response.raise_for_status()
        return response.json()
    except requests.RequestException as e:
        logger.error(f"NHL API request failed: {url} - {e}")
        raise ProviderError(str(e)) from e
    except ValueError as e:
        logger.error(f"NHL API returned invalid JSON: {url} - {e}")
        raise ProviderError(f"invalid JSON from {url}") from e


def _normalize_stat_line(stat: Dict[str, Any], name: Optional[str]) -> Dict[str, Any]:
    """
    Map a provider stat block to the fields the tracker uses.
    Points fall back to goals + assists when the block has no points figure.
    """
    goals = safe_int(stat.get("goals"))
    assists = safe_int(stat.get("assists"))
    points = stat.get("points")
    return {
        "name": safe_strip(name) or None,
        "games": safe_int(stat.get("games") or stat.get("gamesPlayed")),
        "goals": goals,
        "assists": assists,
        "points": safe_int(points) if points is not None else goals + assists,
        "shots": safe_int(stat.get("shots")),
    }


class StatsProvider(Protocol):
    """
    Interface for NHL data providers.

    Implementations:
    - SearchApiProvider: search endpoint + season stats endpoint (current)
    - LegacyRosterProvider: team rosters + person record with nested stats
    """

    def fetch_roster(self) -> List[DirectoryEntry]:
        """
        Fetch every known player in one bulk call.

        Raises:
            ProviderError: on transport failure or malformed payload
        """
        ...

    def fetch_player_season_stats(self, player_id: int, season: str) -> Optional[Dict[str, Any]]:
        """
        Fetch one player's aggregates for a season.

        Returns:
            Dict with name, games, goals, assists, points and shots,
            or None when the provider has no stats for that season

        Raises:
            ProviderError: on transport failure or malformed payload
        """
        ...


class SearchApiProvider:
    """Flat player list from the search API, stats keyed by season string."""

    def __init__(
        self,
        search_url: Optional[str] = None,
        stats_url: Optional[str] = None,
        limit: Optional[int] = None,
    ):
        self.search_url = (search_url or settings.nhl_search_api_url).rstrip("/")
        self.stats_url = (stats_url or settings.nhl_stats_api_url).rstrip("/")
        self.limit = limit or settings.directory_limit

    def fetch_roster(self) -> List[DirectoryEntry]:
        logger.info("Fetching all NHL players from search API...")
        data = _get_json(
            f"{self.search_url}/search/player",
            {"culture": "en-us", "limit": self.limit, "q": "*"},
        )
        if not isinstance(data, list):
            raise ProviderError("search API returned a non-list payload")

        entries = []
        for item in data:
            if not isinstance(item, dict):
                continue
            player_id = safe_int(item.get("playerId"))
            name = safe_strip(item.get("name") or item.get("fullName"))
            if player_id and name:
                entries.append(DirectoryEntry(id=player_id, name=name))
        return entries

    def fetch_player_season_stats(self, player_id: int, season: str) -> Optional[Dict[str, Any]]:
        data = _get_json(
            f"{self.stats_url}/people/{player_id}/stats",
            {"stats": "statsSingleSeason", "season": season},
        )
        if not isinstance(data, dict):
            raise ProviderError(f"stats payload for player {player_id} is not an object")

        try:
            return self._parse_season_stats(data)
        except _SHAPE_ERRORS as e:
            logger.error(f"Malformed stats payload for player {player_id}: {e!r}")
            raise ProviderError(f"malformed stats payload for player {player_id}") from e

    @staticmethod
    def _parse_season_stats(data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        stats = data.get("stats") or []
        splits = (stats[0].get("splits") or []) if stats else []
        if not splits:
            return None

        people = data.get("people") or []
        name = people[0].get("fullName") if people else None
        return _normalize_stat_line(splits[0].get("stat") or {}, name)


class LegacyRosterProvider:
    """Team rosters for the directory, person records with nested season stats."""

    def __init__(self, stats_url: Optional[str] = None):
        self.stats_url = (stats_url or settings.nhl_stats_api_url).rstrip("/")

    def fetch_roster(self) -> List[DirectoryEntry]:
        logger.info("Fetching NHL team rosters...")
        data = _get_json(f"{self.stats_url}/teams", {"expand": "team.roster"})
        if not isinstance(data, dict) or not isinstance(data.get("teams"), list):
            raise ProviderError("teams payload is missing a teams list")

        try:
            return self._parse_rosters(data["teams"])
        except _SHAPE_ERRORS as e:
            logger.error(f"Malformed teams payload: {e!r}")
            raise ProviderError("malformed teams payload") from e

    @staticmethod
    def _parse_rosters(teams: List[Any]) -> List[DirectoryEntry]:
        entries = []
        for team in teams:
            for slot in (team.get("roster") or {}).get("roster") or []:
                person = slot.get("person") or {}
                player_id = safe_int(person.get("id"))
                name = safe_strip(person.get("fullName"))
                if player_id and name:
                    entries.append(DirectoryEntry(id=player_id, name=name))
        return entries

    def fetch_player_season_stats(self, player_id: int, season: str) -> Optional[Dict[str, Any]]:
        data = _get_json(
            f"{self.stats_url}/people/{player_id}",
            {"expand": "person.stats", "stats": "statsSingleSeason", "season": season},
        )
        if not isinstance(data, dict):
            raise ProviderError(f"person payload for player {player_id} is not an object")

        try:
            return self._parse_person_stats(data, season)
        except _SHAPE_ERRORS as e:
            logger.error(f"Malformed person payload for player {player_id}: {e!r}")
            raise ProviderError(f"malformed person payload for player {player_id}") from e

    @staticmethod
    def _parse_person_stats(data: Dict[str, Any], season: str) -> Optional[Dict[str, Any]]:
        people = data.get("people") or []
        if not people:
            return None
        person = people[0]

        for block in person.get("stats") or []:
            for split in block.get("splits") or []:
                if split.get("season") in (None, season):
                    return _normalize_stat_line(split.get("stat") or {}, person.get("fullName"))
        return None


PROVIDERS = {
    "search": SearchApiProvider,
    "legacy": LegacyRosterProvider,
}


def get_stats_provider(name: Optional[str] = None) -> StatsProvider:
    """Build the provider configured by the stats_provider setting."""
    key = name or settings.stats_provider
    if key not in PROVIDERS:
        raise ValueError(f"Unknown stats provider '{key}' (expected one of {sorted(PROVIDERS)})")
    return PROVIDERS[key]()
