import logging
from dataclasses import dataclass, field
from typing import Protocol, List, Dict, Any, Optional, Type

# A global registry for all adapters
ADAPTERS: List[Type["SourceAdapter"]] = []

ODDS_SENTINEL = "0.00"
JOCKEY_SENTINEL = "N/A"
TIME_TBD = "TBD"
TIME_NA = "N/A"


@dataclass(frozen=True)
class HorseOdds:
    """
    Odds extracted for one runner. None means the value was not found on the
    page; the "0.00" sentinel only appears in the serialized form.
    """
    open: Optional[str] = None
    fluc1: Optional[str] = None
    fluc2: Optional[str] = None
    win_fixed: Optional[str] = None
    place_fixed: Optional[str] = None
    each_way_fixed: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        return {
            "open": self.open or ODDS_SENTINEL,
            "fluc1": self.fluc1 or ODDS_SENTINEL,
            "fluc2": self.fluc2 or ODDS_SENTINEL,
            "winFixed": self.win_fixed or ODDS_SENTINEL,
            "placeFixed": self.place_fixed or ODDS_SENTINEL,
            "eachWayFixed": self.each_way_fixed or ODDS_SENTINEL,
        }


@dataclass(frozen=True)
class HorseRecord:
    """One runner on a race card, ranked by the order it was located in."""
    rank: int
    number: str
    name: str
    jockey: Optional[str] = None
    odds: HorseOdds = field(default_factory=HorseOdds)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rank": self.rank,
            "horseNumber": self.number,
            "horseName": self.name,
            "jockey": self.jockey or JOCKEY_SENTINEL,
            "odds": self.odds.to_dict(),
        }


@dataclass
class RaceEntry:
    race_number: str
    time: str = TIME_TBD
    result: str = ""
    link: Optional[str] = None
    horses: List[HorseRecord] = field(default_factory=list)

    @property
    def is_completed(self) -> bool:
        return bool(self.result)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "raceNumber": self.race_number,
            "time": self.time,
            "result": self.result,
            "link": self.link,
            "horses": [h.to_dict() for h in self.horses],
            "horseCount": len(self.horses),
        }


@dataclass
class TrackEntry:
    racetrack: str
    track_link_url: Optional[str] = None
    races: List[RaceEntry] = field(default_factory=list)
    country: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "racetrack": self.racetrack,
            "tracklinkUrl": self.track_link_url,
            "completedRaces": [r.to_dict() for r in self.races],
        }
        if self.country:
            data["country"] = self.country
        return data


class SourceAdapter(Protocol):
    """
    The protocol that all data source adapters must conform to. Adapters
    fetch and parse one bookmaker site and return TrackEntry snapshots.
    """
    source_id: str

    def initialize(self) -> bool:
        ...

    async def fetch(self) -> List[TrackEntry]:
        ...


def register_adapter(cls: Type[SourceAdapter]) -> Type[SourceAdapter]:
    """
    A class decorator to register a new adapter in the global registry.
    """
    if not hasattr(cls, "source_id"):
        raise TypeError(f"Adapter {cls.__name__} must have a 'source_id' attribute.")

    if cls not in ADAPTERS:
        logging.info(f"Registering adapter: {cls.__name__} for source '{cls.source_id}'")
        ADAPTERS.append(cls)
    return cls


def get_adapter(source_id: str) -> Type[SourceAdapter]:
    for cls in ADAPTERS:
        if cls.source_id == source_id:
            return cls
    raise KeyError(f"No adapter registered for source '{source_id}'")
