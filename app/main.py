"""
NHL Stats Tracker - Main FastAPI Application
Tracked players stored in the nhl_players table, stats fetched live from the NHL API
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app import crud
from app.db import get_db, init_db
from app.directory import PlayerDirectory
from app.nhl_client import StatsProvider, get_stats_provider
from app.refresh import RefreshInProgress, refresh_all, refresh_guard, is_refreshing
from app.schemas import (
    AddFromDirectory,
    RefreshResponse,
    SearchResults,
    StatsSnapshot,
    TrackedPlayerCreate,
    TrackedPlayerRow,
    TrackedPlayerUpdate,
)
from app.season import current_season, season_label
from app.stats_fetcher import StatsFetcher
from app.view_models import SORT_OPTIONS, players_to_rows, to_row
from config.settings import settings

logger = logging.getLogger("main")

# Version tracking
APP_VERSION = "v0.3.0"
APP_NAME = "NHL Stats Tracker"


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title=APP_NAME,
    description="Track NHL points and shots on goal against betting lines",
    version=APP_VERSION,
    lifespan=lifespan,
)

_provider: Optional[StatsProvider] = None
_directory: Optional[PlayerDirectory] = None


def get_provider() -> StatsProvider:
    """Get or create the configured NHL data provider."""
    global _provider
    if _provider is None:
        _provider = get_stats_provider()
    return _provider


def get_directory() -> PlayerDirectory:
    """Get or create the process-wide player directory."""
    global _directory
    if _directory is None:
        _directory = PlayerDirectory(
            get_provider(),
            ttl_seconds=settings.directory_cache_ttl_seconds,
        )
    return _directory


def get_stats_fetcher(directory: PlayerDirectory = Depends(get_directory)) -> StatsFetcher:
    return StatsFetcher(directory.provider, directory)


def _storage_failure(e: crud.StorageError) -> HTTPException:
    logger.error(f"Storage error surfaced to client: {e}")
    return HTTPException(status_code=500, detail=f"Storage error: {e}")


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok", "source": "nhl-api", "refreshing": is_refreshing()}


@app.get("/version")
def version_info():
    """Version information endpoint."""
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "full": f"{APP_NAME} {APP_VERSION}"
    }


@app.get("/api/season")
def season_info():
    """Current NHL season."""
    season = current_season()
    return {"season": season, "label": season_label(season)}


@app.get("/cache/stats")
def cache_stats(directory: PlayerDirectory = Depends(get_directory)):
    """Get player directory cache statistics."""
    return directory.get_stats()


# ===== PLAYERS =====

@app.get("/api/players", response_model=list[TrackedPlayerRow])
def list_players(
    sort: str = Query(default="name", description="name, points or shots"),
    db: Session = Depends(get_db),
):
    """List tracked players with per-game averages."""
    if sort not in SORT_OPTIONS:
        raise HTTPException(status_code=422, detail=f"sort must be one of {list(SORT_OPTIONS)}")
    try:
        return players_to_rows(crud.get_players(db), sort)
    except crud.StorageError as e:
        raise _storage_failure(e)


@app.post("/api/players", response_model=TrackedPlayerRow, status_code=201)
def add_player(draft: TrackedPlayerCreate, db: Session = Depends(get_db)):
    """Add a tracked player (manual entry)."""
    try:
        return to_row(crud.create_player(db, draft.model_dump()))
    except crud.StorageError as e:
        raise _storage_failure(e)


@app.post("/api/players/from-directory", response_model=TrackedPlayerRow, status_code=201)
def add_player_from_directory(
    pick: AddFromDirectory,
    db: Session = Depends(get_db),
    fetcher: StatsFetcher = Depends(get_stats_fetcher),
):
    """Add a player picked from search, prefilled with current-season stats."""
    snapshot = fetcher.fetch(pick.nhl_player_id)
    if snapshot is None:
        raise HTTPException(status_code=502, detail="Could not fetch stats from NHL API")

    name = pick.name or snapshot.player_name
    draft = {
        "name": name,
        "nhl_player_id": pick.nhl_player_id,
        "points_games": snapshot.points,
        "points_total_games": snapshot.total_games,
        "shots_threshold": pick.shots_threshold,
        "shots_games": snapshot.shots,
        "shots_total_games": snapshot.total_games,
    }
    try:
        return to_row(crud.create_player(db, draft))
    except crud.StorageError as e:
        raise _storage_failure(e)


@app.get("/api/players/{player_id}", response_model=TrackedPlayerRow)
def get_player(player_id: str, db: Session = Depends(get_db)):
    """Get one tracked player."""
    try:
        player = crud.get_player_by_id(db, player_id)
    except crud.StorageError as e:
        raise _storage_failure(e)
    if not player:
        raise HTTPException(status_code=404, detail="Player not found")
    return to_row(player)


@app.patch("/api/players/{player_id}", response_model=TrackedPlayerRow)
def edit_player(player_id: str, updates: TrackedPlayerUpdate, db: Session = Depends(get_db)):
    """Update a tracked player's fields."""
    try:
        player = crud.update_player(db, player_id, updates.model_dump(exclude_unset=True))
    except crud.StorageError as e:
        raise _storage_failure(e)
    if not player:
        raise HTTPException(status_code=404, detail="Player not found")
    return to_row(player)


@app.delete("/api/players/{player_id}", status_code=204)
def remove_player(player_id: str, db: Session = Depends(get_db)):
    """Delete a tracked player."""
    try:
        deleted = crud.delete_player(db, player_id)
    except crud.StorageError as e:
        raise _storage_failure(e)
    if not deleted:
        raise HTTPException(status_code=404, detail="Player not found")
    return Response(status_code=204)


# ===== NHL DATA =====

@app.get("/api/search", response_model=SearchResults)
def search_players(
    q: str = Query(..., min_length=2, description="Player name"),
    limit: int = Query(default=settings.search_result_limit, ge=1, le=200),
    directory: PlayerDirectory = Depends(get_directory),
):
    """Search the NHL player directory by name."""
    players = directory.search(q, limit=limit)
    return {"query": q, "count": len(players), "players": players}


@app.get("/api/stats/{nhl_player_id}", response_model=StatsSnapshot)
def player_stats(nhl_player_id: int, fetcher: StatsFetcher = Depends(get_stats_fetcher)):
    """Current-season stats for an NHL player."""
    snapshot = fetcher.fetch(nhl_player_id)
    if snapshot is None:
        raise HTTPException(status_code=502, detail="Could not fetch stats from NHL API")
    return snapshot


@app.post("/api/directory/refresh")
def refresh_directory(directory: PlayerDirectory = Depends(get_directory)):
    """Drop the cached player directory so the next search reloads it."""
    directory.refresh()
    return {"status": "ok"}


# ===== REFRESH =====

@app.post("/api/refresh", response_model=RefreshResponse)
def refresh_stats(
    db: Session = Depends(get_db),
    fetcher: StatsFetcher = Depends(get_stats_fetcher),
):
    """Refresh every tracked player's stats from the NHL API."""
    try:
        with refresh_guard():
            summary = refresh_all(db, crud.get_players(db), fetcher)
            players = players_to_rows(crud.get_players(db))
    except RefreshInProgress as e:
        raise HTTPException(status_code=409, detail=str(e))
    except crud.StorageError as e:
        raise _storage_failure(e)

    return {
        "season": current_season(),
        "summary": summary,
        "message": summary.message(),
        "players": players,
    }
