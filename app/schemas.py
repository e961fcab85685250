"""
Pydantic schemas for API request/response models
Tracked players, directory entries, stats snapshots and refresh summaries
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

from app.models import SHOTS_THRESHOLDS, UNSET_NHL_PLAYER_ID


def _check_threshold(value: Optional[float]) -> Optional[float]:
    if value is not None and float(value) not in SHOTS_THRESHOLDS:
        raise ValueError(f"shots_threshold must be one of {list(SHOTS_THRESHOLDS)}")
    return value


def _strip_name(value):
    if isinstance(value, str):
        return value.strip()
    return value


# ===== TRACKED PLAYER SCHEMAS =====

class TrackedPlayerCreate(BaseModel):
    """Draft for a new tracked player - only name is required"""
    name: str = Field(min_length=1)
    nhl_player_id: int = Field(default=UNSET_NHL_PLAYER_ID, ge=0)
    points_games: int = Field(default=0, ge=0)
    points_total_games: int = Field(default=0, ge=0)
    shots_threshold: float = 1.5
    shots_games: int = Field(default=0, ge=0)
    shots_total_games: int = Field(default=0, ge=0)

    @field_validator("name", mode="before")
    @classmethod
    def name_is_trimmed(cls, value):
        return _strip_name(value)

    @field_validator("shots_threshold")
    @classmethod
    def threshold_is_a_line(cls, value):
        return _check_threshold(value)


class TrackedPlayerUpdate(BaseModel):
    """Partial update - only supplied fields are written"""
    name: Optional[str] = Field(default=None, min_length=1)
    nhl_player_id: Optional[int] = Field(default=None, ge=0)
    points_games: Optional[int] = Field(default=None, ge=0)
    points_total_games: Optional[int] = Field(default=None, ge=0)
    shots_threshold: Optional[float] = None
    shots_games: Optional[int] = Field(default=None, ge=0)
    shots_total_games: Optional[int] = Field(default=None, ge=0)

    @field_validator("name", mode="before")
    @classmethod
    def name_is_trimmed(cls, value):
        return _strip_name(value)

    @field_validator("shots_threshold")
    @classmethod
    def threshold_is_a_line(cls, value):
        return _check_threshold(value)


class TrackedPlayer(BaseModel):
    """Tracked player row as stored"""
    id: str
    name: str
    nhl_player_id: int
    points_games: int
    points_total_games: int
    shots_threshold: float
    shots_games: int
    shots_total_games: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TrackedPlayerRow(TrackedPlayer):
    """Tracked player with per-game averages for display"""
    points_average: float
    shots_average: float
    shots_threshold_label: str


class AddFromDirectory(BaseModel):
    """Create a tracked row from a directory pick"""
    nhl_player_id: int = Field(gt=0)
    name: Optional[str] = None
    shots_threshold: float = 1.5

    @field_validator("name", mode="before")
    @classmethod
    def name_is_trimmed(cls, value):
        return _strip_name(value)

    @field_validator("shots_threshold")
    @classmethod
    def threshold_is_a_line(cls, value):
        return _check_threshold(value)


# ===== DIRECTORY / STATS SCHEMAS =====

class DirectoryEntry(BaseModel):
    """Player directory entry"""
    id: int
    name: str


class SearchResults(BaseModel):
    query: str
    count: int
    players: List[DirectoryEntry]


class StatsSnapshot(BaseModel):
    """Current-season aggregates for one player"""
    player_id: int
    player_name: str
    total_games: int = 0
    points: int = 0
    shots: int = 0


# ===== REFRESH SCHEMAS =====

class RefreshFailure(BaseModel):
    name: str
    reason: str


class RefreshSummary(BaseModel):
    updated_count: int = 0
    failures: List[RefreshFailure] = []

    def message(self) -> str:
        """Human-readable end-of-batch summary."""
        text = f"Stats Refresh Complete: Updated {self.updated_count} player(s)."
        if self.failures:
            text += f"\n\nFailed to update {len(self.failures)} player(s):\n"
            text += "\n".join(f"- {f.name}: {f.reason}" for f in self.failures)
        return text


class RefreshResponse(BaseModel):
    season: str
    summary: RefreshSummary
    message: str
    players: List[TrackedPlayerRow]
