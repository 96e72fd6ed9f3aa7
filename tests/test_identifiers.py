"""Tests for identifier extraction from solar systems."""

from higgs.stages import identifiers
from higgs.stages.identifiers import unique_ids
from higgs.types import SolarSystem


def make_system(system_id, star_id=0, planets=None, stargates=None, stations=None):
    return SolarSystem.model_validate(
        {
            "system_id": system_id,
            "star_id": star_id,
            "planets": planets or [],
            "stargates": stargates or [],
            "stations": stations or [],
        }
    )


class TestUniqueIds:
    """Tests for dedup and sentinel removal."""

    def test_merges_lists_and_drops_sentinel(self):
        ids = unique_ids([0, 5, 5, 7] + [7, 9, 0])
        assert set(ids) == {5, 7, 9}
        assert len(ids) == 3

    def test_keeps_first_seen_order(self):
        assert unique_ids([3, 1, 3, 2, 1]) == [3, 1, 2]

    def test_empty(self):
        assert unique_ids([]) == []
        assert unique_ids([0, 0]) == []


class TestSystemChildren:
    """Tests for the per-stage extractors."""

    def test_star_ids_skip_starless_systems(self):
        systems = [make_system(1, star_id=5), make_system(2, star_id=0), make_system(3, star_id=5)]
        assert identifiers.star_ids(systems) == [5]

    def test_nested_planet_children(self):
        systems = [
            make_system(
                1,
                planets=[
                    {"planet_id": 10, "moons": [100, 101], "asteroid_belts": [200]},
                    {"planet_id": 11, "moons": [0]},
                ],
            ),
            make_system(2, planets=[{"planet_id": 10, "moons": [101, 102]}]),
        ]

        assert identifiers.planet_ids(systems) == [10, 11]
        assert identifiers.moon_ids(systems) == [100, 101, 102]
        assert identifiers.asteroid_belt_ids(systems) == [200]

    def test_gates_and_stations(self):
        systems = [
            make_system(1, stargates=[7, 9], stations=[60]),
            make_system(2, stargates=[9, 0], stations=[]),
        ]

        assert identifiers.stargate_ids(systems) == [7, 9]
        assert identifiers.station_ids(systems) == [60]

    def test_systems_read_back_from_store(self):
        """Documents keyed on _id decode like ESI payloads."""
        system = SolarSystem.model_validate({"_id": 30000001, "star_id": 40000001})
        assert system.system_id == 30000001
        assert identifiers.star_ids([system]) == [40000001]
