"""
NHL season helpers.

The NHL uses an 8-digit season id made of the start and end years ("20242025").
Seasons run Oct-Jun, so Jan-Aug belongs to the season that started last year.
"""
from datetime import date
from typing import Optional


def current_season(today: Optional[date] = None) -> str:
    """
    Compute the active NHL season id for a date (defaults to today).

    Always derived from the date, never cached: the season rolls over
    on September 1st.
    """
    today = today or date.today()
    year = today.year
    # date.month is 1-based; Jan-Aug is still last year's season
    if today.month <= 8:
        return f"{year - 1}{year}"
    return f"{year}{year + 1}"


def season_label(season: str) -> str:
    """Convert '20242025' to '2024-25'."""
    if len(season) != 8 or not season.isdigit():
        return season
    return f"{season[:4]}-{season[6:]}"
