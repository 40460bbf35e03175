"""Tests for merge-decoding into receptacles."""

import pytest
from pydantic import AliasChoices, BaseModel, Field, model_validator

from httpipe._internal.dispatch.merge import check_receptacle, merge_into
from httpipe.exceptions import ContractError, DecodeError


class Greeting(BaseModel):
    word: str
    name: str
    untouched: str


class Location(BaseModel):
    lat: float = 0.0
    lon: float = 0.0


class Station(BaseModel):
    station_id: str = Field(default="", alias="stationId")
    location: Location = Location()
    readings: list[int] = []


class Loose(BaseModel):
    known: str = ""

    model_config = {"extra": "allow"}


class Frozen(BaseModel):
    value: int = 0

    model_config = {"frozen": True}


class Range(BaseModel):
    lo: int = 0
    hi: int = 0
    label: str = ""

    model_config = {"validate_assignment": True}

    @model_validator(mode="after")
    def ordered(self) -> "Range":
        if self.lo > self.hi:
            raise ValueError("lo must not exceed hi")
        return self


class CityRef(BaseModel):
    city_id: int = Field(0, validation_alias="cityId")
    zip_code: str = Field("", validation_alias=AliasChoices("zip", "postalCode"))
    country: str = "US"


class Byname(BaseModel):
    station_id: str = Field(default="", alias="stationId")

    model_config = {"populate_by_name": True}


class TestMergeModel:
    """Tests for merging into pydantic models."""

    def test_only_present_fields_overwritten(self):
        greet = Greeting(word="OVERWRITEWORD", name="NOT A NAME", untouched="SAME")
        result = merge_into(greet, {"word": "hello", "name": "Rob"})

        assert result is greet
        assert greet.word == "hello"
        assert greet.name == "Rob"
        assert greet.untouched == "SAME"

    def test_alias_keys(self):
        station = Station()
        merge_into(station, {"stationId": "KNYC"})
        assert station.station_id == "KNYC"

    def test_nested_objects_merge(self):
        station = Station(location=Location(lat=40.7, lon=-74.0))
        merge_into(station, {"location": {"lat": 41.0}})
        assert station.location.lat == 41.0
        assert station.location.lon == -74.0

    def test_lists_replace(self):
        station = Station(readings=[1, 2, 3])
        merge_into(station, {"readings": [9]})
        assert station.readings == [9]

    def test_unknown_keys_ignored(self):
        greet = Greeting(word="a", name="b", untouched="c")
        merge_into(greet, {"color": "blue"})
        assert greet.model_dump() == {"word": "a", "name": "b", "untouched": "c"}

    def test_extra_allow_keeps_unknown_keys(self):
        loose = Loose()
        merge_into(loose, {"known": "yes", "other": 1})
        assert loose.known == "yes"
        assert loose.model_extra == {"other": 1}

    def test_type_mismatch_is_atomic(self):
        """A failed merge leaves every field unchanged."""
        station = Station(stationId="KNYC", readings=[1])
        with pytest.raises(DecodeError) as exc_info:
            merge_into(station, {"stationId": "KLAX", "readings": "many"})
        assert "Station" in str(exc_info.value)
        assert station.station_id == "KNYC"
        assert station.readings == [1]

    def test_null_document_is_noop(self):
        greet = Greeting(word="a", name="b", untouched="c")
        merge_into(greet, None)
        assert greet.word == "a"


class TestValidateAssignment:
    """Models with validate_assignment are checked as a whole, not field by field."""

    def test_fields_move_together(self):
        """Each new value alone would break lo <= hi; together they are valid."""
        bounds = Range(lo=0, hi=10, label="keep")
        merge_into(bounds, {"lo": 20, "hi": 30})
        assert (bounds.lo, bounds.hi, bounds.label) == (20, 30, "keep")

    def test_invalid_result_raises_decode_error(self):
        bounds = Range(lo=0, hi=10)
        with pytest.raises(DecodeError) as exc_info:
            merge_into(bounds, {"lo": 20})
        assert "Range" in str(exc_info.value)
        assert (bounds.lo, bounds.hi) == (0, 10)

    def test_fields_set_tracks_merged_fields(self):
        bounds = Range()
        merge_into(bounds, {"hi": 5})
        assert bounds.model_fields_set == {"hi"}


class TestValidationAliases:
    """Fields are matched by the keys they validate from."""

    def test_validation_alias(self):
        ref = CityRef()
        merge_into(ref, {"cityId": 5})
        assert ref.city_id == 5

    def test_untouched_alias_field_keeps_value(self):
        ref = CityRef(cityId=7, zip="10001")
        merge_into(ref, {"country": "CA"})
        assert (ref.city_id, ref.zip_code, ref.country) == (7, "10001", "CA")

    @pytest.mark.parametrize("key", ["zip", "postalCode"])
    def test_alias_choices(self, key):
        ref = CityRef(cityId=7)
        merge_into(ref, {key: "60601"})
        assert ref.zip_code == "60601"
        assert ref.city_id == 7

    def test_field_name_ignored_without_populate_by_name(self):
        ref = CityRef(cityId=7)
        merge_into(ref, {"city_id": 9})
        assert ref.city_id == 7

    @pytest.mark.parametrize("key", ["stationId", "station_id"])
    def test_populate_by_name(self, key):
        station = Byname()
        merge_into(station, {key: "KNYC"})
        assert station.station_id == "KNYC"

    def test_invalid_alias_value_is_atomic(self):
        ref = CityRef(cityId=7)
        with pytest.raises(DecodeError):
            merge_into(ref, {"cityId": "seven", "country": "CA"})
        assert (ref.city_id, ref.country) == (7, "US")


class TestMergeMapping:
    """Tests for merging into mutable mappings."""

    def test_updates_in_place(self):
        out = {"name": "New York", "id": 0}
        result = merge_into(out, {"id": 1, "state": "New York"})
        assert result is out
        assert out == {"name": "New York", "id": 1, "state": "New York"}

    def test_nested_merge(self):
        out = {"meta": {"a": 1, "b": 2}}
        merge_into(out, {"meta": {"b": 3, "c": 4}})
        assert out == {"meta": {"a": 1, "b": 3, "c": 4}}

    def test_does_not_share_decoded_containers(self):
        decoded = {"tags": ["a"]}
        out: dict = {}
        merge_into(out, decoded)
        decoded["tags"].append("b")
        assert out["tags"] == ["a"]


class TestShapeErrors:
    """Tests for documents that cannot be merged."""

    @pytest.mark.parametrize("decoded", [[1, 2], 3, "text", True])
    def test_non_object_documents(self, decoded):
        with pytest.raises(DecodeError):
            merge_into({}, decoded)


class TestCheckReceptacle:
    """Tests for check_receptacle()."""

    def test_accepts_models_and_mappings(self):
        check_receptacle({})
        check_receptacle(Station())

    def test_rejects_none(self):
        with pytest.raises(ContractError):
            check_receptacle(None)

    def test_rejects_frozen_model(self):
        with pytest.raises(ContractError) as exc_info:
            check_receptacle(Frozen())
        assert "frozen" in str(exc_info.value)

    @pytest.mark.parametrize("target", [42, "text", [1], (1,)])
    def test_rejects_other_types(self, target):
        with pytest.raises(ContractError):
            check_receptacle(target)
