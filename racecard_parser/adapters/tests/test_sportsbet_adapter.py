import asyncio
import os
import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from racecard_parser.adapters.sportsbet import SportsbetAdapter
from racecard_parser.config_manager import ConfigurationManager
from racecard_parser.fetching import FetchingError
from racecard_parser.schedule import COMPLETED, UPCOMING

TESTS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', '..', 'tests')

SITE_CONFIG = {
    "enabled": True,
    "base_url": "https://www.sportsbet.com.au",
    "schedule_path": "/racing-schedule/{scope}",
    "default_scope": "horse/today",
    "country": None,
    "excluded_track_slugs": ["ellerslie"],
    "selectors": {},
}

RESULTS_PAGE = (
    '<div data-automation-id="results-header">'
    '<div><span>Race 1</span></div><div><span>Sat 25 Oct 12:40</span></div>'
    '</div>'
)


def _read(name: str) -> str:
    with open(os.path.join(TESTS_DIR, name), 'r', encoding='utf-8') as f:
        return f.read()


class TestSportsbetAdapter(unittest.TestCase):

    def setUp(self):
        self.schedule_html = _read('sportsbet_schedule_sample.html')
        self.racecard_html = _read('sportsbet_racecard_sample.html')

        mock_config_manager = MagicMock(spec=ConfigurationManager)
        mock_config_manager.get_adapter_config.return_value = dict(SITE_CONFIG)
        self.adapter = SportsbetAdapter(config_manager=mock_config_manager)
        self.assertTrue(self.adapter.initialize())

        pause_patcher = patch("racecard_parser.adapters.sportsbet.polite_pause", new_callable=AsyncMock)
        self.mock_pause = pause_patcher.start()
        self.addCleanup(pause_patcher.stop)

    def _pages(self, failing=()):
        """Serves the sample pages by URL; URLs containing a `failing` token raise."""
        requested = []

        async def side_effect(url, *args, **kwargs):
            requested.append(url)
            if any(token in url for token in failing):
                raise FetchingError(f"Failed to fetch {url}")
            if "/racing-schedule/" in url:
                return self.schedule_html
            if "race-1-9759457" in url:
                return self.racecard_html + RESULTS_PAGE
            return self.racecard_html

        return AsyncMock(side_effect=side_effect), requested

    def test_url_building(self):
        self.assertEqual(
            self.adapter.schedule_url("/tomorrow/"),
            "https://www.sportsbet.com.au/racing-schedule/tomorrow",
        )
        self.assertEqual(
            self.adapter.absolute_url("/horse-racing/australia-nz/ipswich/race-3-9733774"),
            "https://www.sportsbet.com.au/horse-racing/australia-nz/ipswich/race-3-9733774",
        )
        self.assertEqual(self.adapter.absolute_url("https://example.com/x"), "https://example.com/x")

    def test_scrape_schedule_with_cards(self):
        mock_fetch, requested = self._pages()
        with patch("racecard_parser.adapters.sportsbet.fetch_html", mock_fetch):
            tracks = asyncio.run(self.adapter.scrape_schedule())

        self.assertEqual(requested[0], "https://www.sportsbet.com.au/racing-schedule/horse/today")
        # Ellerslie is on the denylist
        self.assertEqual([t.racetrack for t in tracks], ["Randwick", "Sale"])

        races = [r for t in tracks for r in t.races]
        self.assertEqual(len(requested), 1 + len(races))
        self.assertTrue(all(len(r.horses) == 3 for r in races))
        self.assertEqual([h.rank for h in races[0].horses], [1, 2, 3])

        # Fixed pause between race pages, none before the first
        self.assertEqual(self.mock_pause.await_count, len(races) - 1)

        # Completed race time comes from the results header
        self.assertEqual(races[0].time, "12:40")
        self.assertEqual(races[1].time, "11:05")
        self.assertEqual(races[2].time, "TBD")

        data = tracks[0].to_dict()
        self.assertEqual(data["completedRaces"][0]["horseCount"], 3)
        self.assertEqual(data["completedRaces"][0]["horses"][0]["horseName"], "Thunder Bolt")

    def test_failed_race_is_recorded_empty(self):
        mock_fetch, requested = self._pages(failing=("race-1-9759457", "race-2-9759458"))
        with patch("racecard_parser.adapters.sportsbet.fetch_html", mock_fetch):
            with self.assertLogs(level="ERROR"):
                tracks = asyncio.run(self.adapter.scrape_schedule())

        r1, r2, r3 = tracks[0].races
        self.assertEqual((r1.horses, r1.time), ([], "N/A"))
        self.assertEqual((r2.horses, r2.time), ([], "11:05"))
        self.assertEqual(len(r3.horses), 3)
        self.assertEqual(r1.to_dict()["horseCount"], 0)
        # The remaining races were still visited
        self.assertIn("https://www.sportsbet.com.au/horse-racing/australia-nz/sale/race-1-9763544", requested)

    def test_schedule_failure_propagates(self):
        mock_fetch, _ = self._pages(failing=("/racing-schedule/",))
        with patch("racecard_parser.adapters.sportsbet.fetch_html", mock_fetch):
            with self.assertRaises(FetchingError):
                asyncio.run(self.adapter.scrape_schedule("tomorrow"))

    def test_status_filters_and_no_cards(self):
        mock_fetch, requested = self._pages()
        with patch("racecard_parser.adapters.sportsbet.fetch_html", mock_fetch):
            completed = asyncio.run(self.adapter.scrape_schedule(with_cards=False, only=COMPLETED))
            upcoming = asyncio.run(self.adapter.scrape_schedule(with_cards=False, only=UPCOMING))

        self.assertEqual(len(requested), 2)
        self.assertEqual([[r.race_number for r in t.races] for t in completed], [["R1"]])
        # Completed races without a card fetch have no way to resolve a time
        self.assertEqual(completed[0].races[0].time, "N/A")
        self.assertEqual(upcoming[0].races[1].time, "TBD")
        self.assertEqual([[r.race_number for r in t.races] for t in upcoming], [["R2", "R3"], ["R1"]])
        self.assertTrue(all(r.horses == [] for t in upcoming for r in t.races))

    def test_scrape_race_card(self):
        mock_fetch, requested = self._pages()
        with patch("racecard_parser.adapters.sportsbet.fetch_html", mock_fetch):
            horses = asyncio.run(self.adapter.scrape_race_card("/horse-racing/australia-nz/ipswich/race-3-9733774"))

        self.assertEqual(requested, ["https://www.sportsbet.com.au/horse-racing/australia-nz/ipswich/race-3-9733774"])
        self.assertEqual([h.name for h in horses], ["Thunder Bolt", "Silver Arrow", "Quiet Storm"])

    def test_uninitialized_adapter_does_not_fetch(self):
        mock_config_manager = MagicMock(spec=ConfigurationManager)
        mock_config_manager.get_adapter_config.return_value = None
        adapter = SportsbetAdapter(config_manager=mock_config_manager)
        self.assertFalse(adapter.initialize())

        mock_fetch, requested = self._pages()
        with patch("racecard_parser.adapters.sportsbet.fetch_html", mock_fetch):
            self.assertEqual(asyncio.run(adapter.fetch()), [])
            self.assertEqual(asyncio.run(adapter.scrape_race_card("/x/race-1-1")), [])
        self.assertEqual(requested, [])


if __name__ == '__main__':
    unittest.main()
