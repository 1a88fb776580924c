import logging
from typing import Dict, List, Optional
from urllib.parse import urljoin

from .base import BaseAdapter
from ..fetching import close_shared_async_client, fetch_html, polite_pause
from ..racecard import extract_results_time, parse_race_card, resolve_selectors
from ..schedule import filter_races, parse_schedule
from ..sources import HorseRecord, RaceEntry, TrackEntry, TIME_NA, TIME_TBD, register_adapter
from ..utils import make_soup


def _settle_completed_time(race: RaceEntry) -> None:
    # A finished race never gets a schedule time; TBD would read as pending
    if race.is_completed and race.time == TIME_TBD:
        race.time = TIME_NA


@register_adapter
class SportsbetAdapter(BaseAdapter):
    """
    Adapter for the Sportsbet Australia racing pages.

    Reads the racing-schedule page for a scope ("horse/today", "tomorrow",
    "2025-10-25", ...), then visits each race link in turn and extracts its
    race card. Races are fetched one at a time with a fixed pause between
    them; a race that fails keeps an empty horse list.
    """

    source_id = "sportsbet"
    source_name = "Sportsbet Australia"

    @property
    def base_url(self) -> str:
        return self.site_config.get("base_url", "https://www.sportsbet.com.au")

    @property
    def selectors(self) -> Dict[str, str]:
        return resolve_selectors(self.site_config.get("selectors"))

    def absolute_url(self, link: str) -> str:
        return urljoin(self.base_url + "/", link)

    def schedule_url(self, scope: str) -> str:
        path = self.site_config.get("schedule_path", "/racing-schedule/{scope}")
        return self.absolute_url(path.format(scope=scope.strip("/")))

    async def close(self):
        await close_shared_async_client()

    async def fetch(self) -> List[TrackEntry]:
        if not self.is_initialized:
            logging.error(f"Adapter {self.source_id} is not initialized. Cannot fetch.")
            return []
        return await self.scrape_schedule()

    async def scrape_race_card(self, race_url: str) -> List[HorseRecord]:
        """Fetches a single race page and returns its ranked horses."""
        if not self.is_initialized:
            logging.error(f"Adapter {self.source_id} is not initialized. Cannot fetch.")
            return []
        url = self.absolute_url(race_url)
        logging.info(f"[{self.source_id}] Fetching race card from {url}")
        html = await fetch_html(url)
        return parse_race_card(html, self.selectors)

    async def _scrape_race(self, race: RaceEntry) -> None:
        html = await fetch_html(self.absolute_url(race.link))
        soup = make_soup(html)
        race.horses = parse_race_card(soup, self.selectors)
        if race.is_completed and race.time == TIME_TBD:
            race.time = extract_results_time(soup) or TIME_NA

    async def scrape_schedule(
        self,
        scope: Optional[str] = None,
        with_cards: bool = True,
        only: Optional[str] = None,
    ) -> List[TrackEntry]:
        """
        Aggregates every race on the schedule page for `scope`.

        A failure fetching the schedule page itself propagates. Failures on
        individual race pages are logged and leave that race with no horses.
        """
        if not self.is_initialized:
            logging.error(f"Adapter {self.source_id} is not initialized. Cannot fetch.")
            return []

        scope = scope or self.site_config.get("default_scope", "horse/today")
        url = self.schedule_url(scope)
        logging.info(f"[{self.source_id}] Fetching racing schedule from {url}")
        html = await fetch_html(url)

        tracks = parse_schedule(
            html,
            country=self.site_config.get("country"),
            excluded_track_slugs=self.site_config.get("excluded_track_slugs") or [],
        )
        tracks = filter_races(tracks, only)
        if not with_cards:
            for race in (r for t in tracks for r in t.races):
                _settle_completed_time(race)
            return tracks

        pending = [(t, r) for t in tracks for r in t.races if r.link]
        logging.info(f"[{self.source_id}] Scraping race cards for {len(pending)} races.")

        for count, (track, race) in enumerate(pending, start=1):
            if count > 1:
                await polite_pause()
            logging.info(
                f"[{self.source_id}] ({count}/{len(pending)}) {track.racetrack} {race.race_number}"
            )
            try:
                await self._scrape_race(race)
            except Exception as e:
                logging.error(
                    f"[{self.source_id}] Failed to scrape {track.racetrack} {race.race_number} "
                    f"({race.link}): {e}",
                    exc_info=True,
                )
                race.horses = []
                _settle_completed_time(race)

        return tracks
