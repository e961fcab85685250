"""
CRUD operations (Create, Read, Update, Delete)
Repository functions for the nhl_players table
"""
import logging
from datetime import datetime
from typing import Optional, List, Dict, Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import TrackedPlayer

logger = logging.getLogger("crud")

# Columns callers may write; id and timestamps are managed here
WRITABLE_FIELDS = {
    "name",
    "nhl_player_id",
    "points_games",
    "points_total_games",
    "shots_threshold",
    "shots_games",
    "shots_total_games",
}


class StorageError(Exception):
    """The database rejected a read or write."""


def _rollback(db: Session, action: str, error: SQLAlchemyError) -> StorageError:
    db.rollback()
    logger.error(f"Error {action}: {error}")
    return StorageError(f"{action} failed")


# ===== READ =====

def get_players(db: Session) -> List[TrackedPlayer]:
    """
    Get all tracked players, ordered by name
    """
    try:
        return db.query(TrackedPlayer).order_by(TrackedPlayer.name).all()
    except SQLAlchemyError as e:
        raise _rollback(db, "loading players", e) from e


def get_player_by_id(db: Session, player_id: str) -> Optional[TrackedPlayer]:
    """
    Get a specific tracked player by ID
    """
    try:
        return db.query(TrackedPlayer).filter(TrackedPlayer.id == player_id).first()
    except SQLAlchemyError as e:
        raise _rollback(db, "loading player", e) from e


# ===== WRITE =====

def create_player(db: Session, draft: Dict[str, Any]) -> TrackedPlayer:
    """
    Insert a tracked player; omitted numeric fields take column defaults
    """
    fields = {k: v for k, v in draft.items() if k in WRITABLE_FIELDS and v is not None}
    if isinstance(fields.get("name"), str):
        fields["name"] = fields["name"].strip()
    if not fields.get("name"):
        raise ValueError("name is required")

    now = datetime.utcnow()
    player = TrackedPlayer(**fields, created_at=now, updated_at=now)
    try:
        db.add(player)
        db.commit()
    except SQLAlchemyError as e:
        raise _rollback(db, "adding player", e) from e
    db.refresh(player)
    logger.info(f"Added player {player.name} ({player.id})")
    return player


def update_player(db: Session, player_id: str, updates: Dict[str, Any]) -> Optional[TrackedPlayer]:
    """
    Apply a partial update and stamp updated_at
    Returns None if the player doesn't exist
    """
    player = get_player_by_id(db, player_id)
    if player is None:
        return None

    for key, value in updates.items():
        if key in WRITABLE_FIELDS and value is not None:
            setattr(player, key, value)

    # updated_at never moves backwards, even with clock skew
    now = datetime.utcnow()
    player.updated_at = max(now, player.updated_at) if player.updated_at else now

    try:
        db.commit()
    except SQLAlchemyError as e:
        raise _rollback(db, "updating player", e) from e
    db.refresh(player)
    return player


def delete_player(db: Session, player_id: str) -> bool:
    """
    Delete a tracked player
    Returns False if the player doesn't exist
    """
    player = get_player_by_id(db, player_id)
    if player is None:
        return False

    try:
        db.delete(player)
        db.commit()
    except SQLAlchemyError as e:
        raise _rollback(db, "deleting player", e) from e
    logger.info(f"Deleted player {player_id}")
    return True
