import logging
from typing import Iterable, List, Optional, Tuple, Union

from bs4 import BeautifulSoup, Tag

from .normalizer import (
    canonical_track_key,
    find_clock_time,
    is_race_result,
    normalize_whitespace,
    parse_race_path,
)
from .sources import RaceEntry, TrackEntry, TIME_NA, TIME_TBD
from .utils import make_soup, remove_honeypot_links

COMPLETED = "completed"
UPCOMING = "upcoming"


def _track_identity(cell: Tag) -> Tuple[str, Optional[str], Optional[str]]:
    """Returns (track name, track link, country label) from a row's first cell."""
    anchor = cell.find("a")
    if anchor is None:
        return normalize_whitespace(cell.get_text(" ", strip=True)), None, None

    country_span = anchor.find("span")
    country = country_span.get_text(strip=True) if country_span else None

    # The name is the bare text node sitting beside the country label
    holder = country_span.parent if country_span else anchor
    direct = [s.strip() for s in holder.find_all(string=True, recursive=False) if s.strip()]
    if direct:
        name = direct[-1]
    else:
        name = next((s for s in anchor.stripped_strings if s != country), "")
    return normalize_whitespace(name), anchor.get("href"), country


def _find_result(cell: Tag) -> str:
    for div in cell.find_all("div"):
        sub_divs = div.find_all("div", recursive=False)
        if len(sub_divs) >= 2:
            text = sub_divs[1].get_text(strip=True)
            if is_race_result(text):
                return text
    cell_text = cell.get_text(strip=True)
    return cell_text if is_race_result(cell_text) else ""


def _parse_race_cell(cell: Tag, index: int) -> Optional[RaceEntry]:
    link_el = cell.select_one('a[href*="/race-"]')
    link = link_el.get("href") if link_el is not None else None
    result = _find_result(cell)
    if link is None and not result:
        return None

    time = TIME_TBD
    if link_el is not None:
        time = find_clock_time(" ".join(link_el.stripped_strings)) or TIME_TBD
    else:
        # No race page to read the results header from
        time = TIME_NA

    return RaceEntry(race_number=f"R{index + 1}", time=time, result=result, link=link)


def _is_excluded(race: RaceEntry, track_name: str, excluded: Iterable[str]) -> bool:
    excluded = set(excluded)
    if not excluded:
        return False
    if canonical_track_key(track_name) in excluded:
        return True
    path = parse_race_path(race.link)
    return bool(path) and path["track_slug"] in excluded


def parse_schedule(
    page: Union[str, BeautifulSoup],
    country: Optional[str] = None,
    excluded_track_slugs: Iterable[str] = (),
) -> List[TrackEntry]:
    """
    Parses a racing-schedule page into TrackEntry rows.

    Each table row is one track: the first cell names it, every following
    cell is a race numbered by its position. Rows whose country label does not
    match `country`, and races at tracks in `excluded_track_slugs`, are left
    out. Tracks with no remaining races are dropped.
    """
    soup = remove_honeypot_links(make_soup(page))
    excluded = list(excluded_track_slugs or [])
    tracks: List[TrackEntry] = []

    for row in soup.find_all("tr"):
        cells = row.find_all("td", recursive=False)
        if not cells:
            continue

        name, track_link, country_label = _track_identity(cells[0])
        if not name:
            continue
        if country and country_label != country:
            logging.debug(f"Skipping track '{name}' ({country_label}), not in {country}.")
            continue

        races = []
        for index, cell in enumerate(cells[1:]):
            race = _parse_race_cell(cell, index)
            if race is None:
                continue
            if _is_excluded(race, name, excluded):
                logging.debug(f"Excluding {name} {race.race_number}: track is on the denylist.")
                continue
            races.append(race)

        if races:
            tracks.append(TrackEntry(
                racetrack=name,
                track_link_url=track_link,
                races=races,
                country=country_label,
            ))

    logging.info(
        f"Parsed {len(tracks)} tracks with {sum(len(t.races) for t in tracks)} races from schedule."
    )
    return tracks


def filter_races(tracks: List[TrackEntry], only: Optional[str] = None) -> List[TrackEntry]:
    """
    Keeps only completed races (those with a result) or only upcoming ones.
    Tracks left without races are dropped.
    """
    if only is None:
        return tracks
    if only not in (COMPLETED, UPCOMING):
        raise ValueError(f"Unknown race filter '{only}', expected '{COMPLETED}' or '{UPCOMING}'")

    filtered = []
    for track in tracks:
        races = [r for r in track.races if r.is_completed == (only == COMPLETED)]
        if races:
            filtered.append(TrackEntry(
                racetrack=track.racetrack,
                track_link_url=track.track_link_url,
                races=races,
                country=track.country,
            ))
    return filtered
