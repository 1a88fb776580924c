import dataclasses
import unittest

from racecard_parser.sources import (
    ADAPTERS,
    HorseOdds,
    HorseRecord,
    RaceEntry,
    TrackEntry,
    get_adapter,
    register_adapter,
)


class TestSerializationBoundary(unittest.TestCase):

    def test_missing_values_become_sentinels(self):
        record = HorseRecord(rank=1, number="3", name="Thunder Bolt")
        self.assertIsNone(record.jockey)
        self.assertIsNone(record.odds.open)

        data = record.to_dict()
        self.assertEqual(data["jockey"], "N/A")
        self.assertEqual(set(data["odds"].values()), {"0.00"})

    def test_real_values_pass_through(self):
        odds = HorseOdds(open="15.00", fluc1="12.50", win_fixed="3.4")
        data = HorseRecord(rank=2, number="7", name="Quiet Storm", jockey="Jamie Kah", odds=odds).to_dict()

        self.assertEqual(data["jockey"], "Jamie Kah")
        self.assertEqual(data["odds"]["open"], "15.00")
        self.assertEqual(data["odds"]["fluc1"], "12.50")
        self.assertEqual(data["odds"]["fluc2"], "0.00")
        self.assertEqual(data["odds"]["winFixed"], "3.4")

    def test_records_are_immutable(self):
        record = HorseRecord(rank=1, number="3", name="Thunder Bolt")
        with self.assertRaises(dataclasses.FrozenInstanceError):
            record.rank = 2
        with self.assertRaises(dataclasses.FrozenInstanceError):
            record.odds.open = "2.00"

    def test_race_and_track_shapes(self):
        race = RaceEntry(
            race_number="R1",
            result="4,5,3",
            link="/horse-racing/australia-nz/randwick/race-1-9759457",
            horses=[HorseRecord(rank=1, number="4", name="Alpha")],
        )
        track = TrackEntry(racetrack="Randwick", track_link_url="/horse-racing/australia-nz/randwick", races=[race])

        self.assertTrue(race.is_completed)
        data = track.to_dict()
        self.assertNotIn("country", data)
        self.assertEqual(data["completedRaces"][0]["time"], "TBD")
        self.assertEqual(data["completedRaces"][0]["horseCount"], 1)


class TestAdapterRegistry(unittest.TestCase):

    def test_register_and_lookup(self):
        @register_adapter
        class DummyAdapter:
            source_id = "dummy"

        try:
            self.assertIs(get_adapter("dummy"), DummyAdapter)
            register_adapter(DummyAdapter)
            self.assertEqual(ADAPTERS.count(DummyAdapter), 1)
        finally:
            ADAPTERS.remove(DummyAdapter)

    def test_missing_source_id(self):
        class Nameless:
            pass

        with self.assertRaises(TypeError):
            register_adapter(Nameless)

    def test_unknown_adapter(self):
        with self.assertRaises(KeyError):
            get_adapter("no-such-bookmaker")


if __name__ == '__main__':
    unittest.main()
