"""Tests for record decoding and document shape."""

import pytest

from higgs.core.errors import RecordDecodeError
from higgs.stages import AsteroidBeltStage, RegionStage, StarStage, TypeStage
from higgs.types import Region, SolarSystem, Star

URL = "https://esi.test/x/"


class TestDocuments:
    """Tests for ESIRecord.to_document."""

    def test_id_stored_as_underscore_id(self):
        region = Region.model_validate({"region_id": 10000001, "name": "Derelik"})
        doc = region.to_document()

        assert doc["_id"] == 10000001
        assert "region_id" not in doc
        assert doc["name"] == "Derelik"

    def test_nested_models_serialized(self):
        system = SolarSystem.model_validate(
            {
                "system_id": 30000001,
                "position": {"x": 1, "y": 2, "z": 3},
                "planets": [{"planet_id": 40000002, "moons": [40000003]}],
            }
        )
        doc = system.to_document()

        assert doc["position"] == {"x": 1.0, "y": 2.0, "z": 3.0}
        assert doc["planets"][0]["moons"] == [40000003]

    def test_round_trip_through_store_shape(self):
        system = SolarSystem.model_validate({"system_id": 1, "star_id": 2})
        again = SolarSystem.model_validate(system.to_document())
        assert again == system

    def test_unknown_fields_ignored(self):
        region = Region.model_validate({"region_id": 1, "brand_new_field": True})
        assert not hasattr(region, "brand_new_field")


class TestStageDecode:
    """Tests for BaseStage.decode."""

    def test_star_id_patched_from_request(self):
        body = b'{"name": "Tanoo - Star", "solar_system_id": 30000001}'
        record = StarStage().decode(URL, 40000001, body)

        assert isinstance(record, Star)
        assert record.star_id == 40000001
        assert record.to_document()["_id"] == 40000001

    def test_belt_id_patched_from_request(self):
        record = AsteroidBeltStage().decode(URL, 40000004, b'{"name": "Belt 1"}')
        assert record.to_document()["_id"] == 40000004

    def test_echoed_id_kept(self):
        record = TypeStage().decode(URL, 34, b'{"type_id": 34, "name": "Tritanium"}')
        assert record.record_id == 34

    def test_missing_required_id_is_decode_error(self):
        with pytest.raises(RecordDecodeError) as exc_info:
            RegionStage().decode(URL, 10000001, b'{"name": "Derelik"}')

        assert exc_info.value.url == URL

    def test_invalid_json_is_decode_error(self):
        with pytest.raises(RecordDecodeError):
            RegionStage().decode(URL, 10000001, b"<html>oops</html>")
