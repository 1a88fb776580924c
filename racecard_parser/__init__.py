"""
Racecard Parser - scrapes Sportsbet racing schedules and race cards into
ranked horse/odds snapshots.
"""

from .racecard import locate_outcome_containers, extract_horse_fields, parse_race_card
from .schedule import parse_schedule
from .sources import HorseOdds, HorseRecord, RaceEntry, TrackEntry

__all__ = [
    "locate_outcome_containers",
    "extract_horse_fields",
    "parse_race_card",
    "parse_schedule",
    "HorseOdds",
    "HorseRecord",
    "RaceEntry",
    "TrackEntry",
]
