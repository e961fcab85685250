"""
Stats refresh
Re-fetches every tracked player's current-season stats and writes them back,
collecting a per-player failure list instead of aborting the batch
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

from sqlalchemy.orm import Session

from app import crud
from app.models import TrackedPlayer
from app.schemas import RefreshFailure, RefreshSummary, StatsSnapshot
from app.stats_fetcher import StatsFetcher
from config.settings import settings

logger = logging.getLogger("refresh")

REASON_MISSING_ID = "missing provider identifier"
REASON_FETCH_FAILED = "could not fetch stats"
REASON_NO_GAMES = "no games played this season"
REASON_STORAGE_FAILED = "storage update failed"

_refresh_lock = threading.Lock()


class RefreshInProgress(Exception):
    """A refresh batch is already running in this process."""


@contextmanager
def refresh_guard() -> Iterator[None]:
    """Hold the process-wide refreshing flag; reject re-entrant refreshes."""
    if not _refresh_lock.acquire(blocking=False):
        raise RefreshInProgress("A stats refresh is already running")
    try:
        yield
    finally:
        _refresh_lock.release()


def is_refreshing() -> bool:
    return _refresh_lock.locked()


@dataclass
class _Target:
    """Detached copy of the fields a refresh reads from a row."""
    id: str
    name: str
    nhl_player_id: int


# (failure reason, snapshot) - exactly one is set
_Outcome = Tuple[Optional[str], Optional[StatsSnapshot]]


def _fetch_one(target: _Target, fetcher: StatsFetcher, by_name: bool) -> _Outcome:
    if by_name:
        identifier = target.name
    elif not target.nhl_player_id:
        return REASON_MISSING_ID, None
    else:
        identifier = target.nhl_player_id

    logger.info(f"Refreshing stats for: {target.name} (ID: {target.nhl_player_id})")
    try:
        snapshot = fetcher.fetch(identifier)
    except Exception as e:
        logger.exception(f"Error refreshing stats for {target.name}")
        return str(e) or type(e).__name__, None

    if snapshot is None:
        return REASON_FETCH_FAILED, None
    if snapshot.total_games == 0:
        return REASON_NO_GAMES, None
    return None, snapshot


def _write(db: Session, target: _Target, snapshot: StatsSnapshot) -> Optional[str]:
    """Store the snapshot's figures; returns a failure reason or None."""
    try:
        updated = crud.update_player(db, target.id, {
            "points_games": snapshot.points,
            "points_total_games": snapshot.total_games,
            "shots_games": snapshot.shots,
            "shots_total_games": snapshot.total_games,
        })
    except crud.StorageError as e:
        logger.error(f"Database error for {target.name}: {e}")
        return REASON_STORAGE_FAILED
    if updated is None:
        logger.error(f"Player {target.name} ({target.id}) disappeared before update")
        return REASON_STORAGE_FAILED
    return None


def refresh_all(
    db: Session,
    players: Iterable[TrackedPlayer],
    fetcher: StatsFetcher,
    by_name: Optional[bool] = None,
    max_workers: Optional[int] = None,
) -> RefreshSummary:
    """
    Refresh every player's stats.

    Players are processed in input order. With max_workers > 1 the NHL fetches
    run in a thread pool; writes always happen one at a time on db.

    Args:
        db: Session used for the writes
        players: Rows to refresh
        fetcher: Stats source
        by_name: Look players up by stored name instead of provider id
        max_workers: Concurrent fetches (1 = strictly sequential)
    """
    by_name = settings.refresh_by_name if by_name is None else by_name
    max_workers = max_workers or settings.refresh_max_workers

    targets = [_Target(p.id, p.name, p.nhl_player_id or 0) for p in players]
    summary = RefreshSummary()
    failures: List[RefreshFailure] = []

    def fetch(target: _Target) -> _Outcome:
        return _fetch_one(target, fetcher, by_name)

    pool = ThreadPoolExecutor(max_workers=max_workers) if max_workers > 1 else None
    try:
        outcomes = pool.map(fetch, targets) if pool else map(fetch, targets)
        for target, (reason, snapshot) in zip(targets, outcomes):
            if reason is None:
                reason = _write(db, target, snapshot)
            if reason is not None:
                logger.warning(f"Skipped {target.name}: {reason}")
                failures.append(RefreshFailure(name=target.name, reason=reason))
                continue
            logger.info(f"Successfully updated {target.name}")
            summary.updated_count += 1
    finally:
        if pool:
            pool.shutdown(wait=True)

    summary.failures = failures
    logger.info(
        f"Stats refresh finished: {summary.updated_count} updated, {len(failures)} failed"
    )
    return summary
