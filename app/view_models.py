"""
View Models for UI Rendering
Maps stored players into display rows with per-game averages and sorting.
"""
from typing import Iterable, List

from app.models import TrackedPlayer
from app.schemas import TrackedPlayerRow, TrackedPlayer as TrackedPlayerSchema
from app.utils.helpers import safe_lower, safe_ratio

SORT_OPTIONS = ("name", "points", "shots")


def points_average(player: TrackedPlayer) -> float:
    """Points per game; 0 when no games are recorded."""
    return safe_ratio(player.points_games, player.points_total_games)


def shots_average(player: TrackedPlayer) -> float:
    """Shots on goal per game; 0 when no games are recorded."""
    return safe_ratio(player.shots_games, player.shots_total_games)


def threshold_label(threshold: float) -> str:
    """0 means no line is being tracked."""
    if not threshold:
        return "None"
    return f"{threshold:g}"


def to_row(player: TrackedPlayer) -> TrackedPlayerRow:
    base = TrackedPlayerSchema.model_validate(player)
    return TrackedPlayerRow(
        **base.model_dump(),
        points_average=round(points_average(player), 2),
        shots_average=round(shots_average(player), 2),
        shots_threshold_label=threshold_label(player.shots_threshold),
    )


def sort_players(players: Iterable[TrackedPlayer], sort_by: str = "name") -> List[TrackedPlayer]:
    """
    Order players for display.
    name: alphabetical; points / shots: highest average first, name breaks ties.
    """
    if sort_by not in SORT_OPTIONS:
        raise ValueError(f"sort_by must be one of {SORT_OPTIONS}")

    by_name = sorted(players, key=lambda p: safe_lower(p.name))
    if sort_by == "points":
        return sorted(by_name, key=points_average, reverse=True)
    if sort_by == "shots":
        return sorted(by_name, key=shots_average, reverse=True)
    return by_name


def players_to_rows(players: Iterable[TrackedPlayer], sort_by: str = "name") -> List[TrackedPlayerRow]:
    return [to_row(p) for p in sort_players(players, sort_by)]
