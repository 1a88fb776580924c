import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .sources import HorseRecord, TrackEntry

SOURCE_NAME = "Sportsbet Australia"


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def format_schedule_json(tracks: List[TrackEntry], scope: Optional[str] = None) -> Dict[str, Any]:
    return {
        "timestamp": _timestamp(),
        "source": SOURCE_NAME,
        "scheduleScope": scope,
        "totalRaces": sum(len(t.races) for t in tracks),
        "racetracks": [t.to_dict() for t in tracks],
    }


def format_race_card_json(horses: List[HorseRecord], race_url: str) -> Dict[str, Any]:
    return {
        "timestamp": _timestamp(),
        "source": SOURCE_NAME,
        "raceUrl": race_url,
        "totalHorses": len(horses),
        "horses": [h.to_dict() for h in horses],
    }


def write_json(payload: Dict[str, Any], output_path: Optional[str] = None) -> str:
    """Serializes payload; writes it to output_path when given."""
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if output_path:
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text + "\n", encoding="utf-8")
        logging.info(f"Wrote JSON report to '{path}'.")
    return text
