"""
Database models for the NHL stats tracker
SQLAlchemy ORM model for the tracked players table
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, String, Float, DateTime, CheckConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Allowed shots-on-goal over/under lines (0 = no line)
SHOTS_THRESHOLDS = (0.0, 1.5, 2.5)

# Provider id used for legacy rows entered by hand
UNSET_NHL_PLAYER_ID = 0


def _new_id() -> str:
    return str(uuid.uuid4())


class TrackedPlayer(Base):
    """
    Tracked player - one row per player being followed
    points_games / shots_games hold season totals (points, shots on goal);
    the *_total_games columns hold games played and act as denominators
    """
    __tablename__ = "nhl_players"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False, index=True)
    nhl_player_id = Column(Integer, nullable=False, default=UNSET_NHL_PLAYER_ID)

    # Points
    points_games = Column(Integer, nullable=False, default=0)
    points_total_games = Column(Integer, nullable=False, default=0)

    # Shots on goal
    shots_threshold = Column(Float, nullable=False, default=1.5)
    shots_games = Column(Integer, nullable=False, default=0)
    shots_total_games = Column(Integer, nullable=False, default=0)

    # Metadata
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("points_games >= 0", name="ck_points_games_nonneg"),
        CheckConstraint("points_total_games >= 0", name="ck_points_total_games_nonneg"),
        CheckConstraint("shots_games >= 0", name="ck_shots_games_nonneg"),
        CheckConstraint("shots_total_games >= 0", name="ck_shots_total_games_nonneg"),
        CheckConstraint("shots_threshold IN (0, 1.5, 2.5)", name="ck_shots_threshold_line"),
    )

    def __repr__(self):
        return f"<TrackedPlayer(id='{self.id}', name='{self.name}', nhl_player_id={self.nhl_player_id})>"
