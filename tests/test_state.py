"""
Tests for the persisted navigation record and the configuration models.
"""

from __future__ import annotations

import copy

import pytest
from pydantic import ValidationError

from travel_nav.options import NavigatorConfig, TravelOptions
from travel_nav.state import RECORD_VERSION, MemoryStateStore, NavigationState, migrate_record
from travel_nav.types import Position

DEST = Position(20, 30, "W1N1")

LEGACY = {
    "state": {
        "prevX": 10,
        "prevY": 11,
        "stuck": 1,
        "cpu": 3,
        "numRepaths": 2,
        "numTravelTo": 5,
        "destX": 20,
        "destY": 30,
        "roomName": "W1N1",
    },
    "path": "3355",
}


class TestMigrateRecord:
    def test_legacy_record(self):
        record = migrate_record(LEGACY)
        assert record == {
            "version": RECORD_VERSION,
            "destination": {"x": 20, "y": 30, "region": "W1N1"},
            "path": "3355",
            "stuck_count": 1,
            "last_coord": [10, 11],
            "cumulative_cost": 3.0,
            "repath_count": 2,
            "travel_invocations": 5,
        }

    def test_legacy_without_counters(self):
        legacy = copy.deepcopy(LEGACY)
        del legacy["state"]["numRepaths"]
        del legacy["state"]["numTravelTo"]
        del legacy["path"]
        record = migrate_record(legacy)
        assert record["repath_count"] == 0
        assert record["travel_invocations"] == 0
        assert record["path"] == ""

    def test_legacy_without_state_block(self):
        record = migrate_record({"path": "11"})
        assert record["destination"] is None
        assert record["path"] == "11"
        assert record["last_coord"] is None

    def test_does_not_mutate_input(self):
        original = copy.deepcopy(LEGACY)
        migrate_record(LEGACY)
        assert LEGACY == original

        current = NavigationState(destination=DEST, path="1").to_record()
        migrated = migrate_record(current)
        assert migrated == current
        assert migrated is not current

    def test_current_record_shares_no_nested_data(self):
        current = NavigationState(destination=DEST, last_coord=(1, 2)).to_record()
        migrated = migrate_record(current)
        migrated["destination"]["x"] = 99
        migrated["last_coord"].append(3)
        assert current["destination"]["x"] == 20
        assert current["last_coord"] == [1, 2]

    def test_rejects_newer_versions(self):
        with pytest.raises(ValueError, match="version 2"):
            migrate_record({"version": 2})


class TestNavigationState:
    def test_fresh_state(self):
        state = NavigationState.from_record(None, DEST)
        assert state.destination == DEST
        assert state.path == ""
        assert state.last_coord is None
        assert state.repath_ratio == 0.0

    def test_round_trip(self):
        state = NavigationState(
            destination=DEST,
            path="1234",
            stuck_count=2,
            last_coord=(4, 5),
            cumulative_cost=1.25,
            repath_count=1,
            travel_invocations=4,
        )
        assert NavigationState.from_record(state.to_record(), Position(0, 0, "E0N0")) == state

    def test_loads_legacy_record(self):
        state = NavigationState.from_record(LEGACY, Position(0, 0, "E0N0"))
        assert state.destination == DEST
        assert state.last_coord == (10, 11)
        assert state.repath_ratio == pytest.approx(0.4)

    def test_legacy_without_destination_uses_caller_destination(self):
        state = NavigationState.from_record({"path": "11"}, DEST)
        assert state.destination == DEST
        assert state.path == "11"

    def test_record_is_plain_data(self):
        record = NavigationState(destination=DEST, last_coord=(1, 2)).to_record()
        assert record["version"] == 1
        assert record["last_coord"] == [1, 2]
        assert record["destination"] == {"x": 20, "y": 30, "region": "W1N1"}


class TestMemoryStateStore:
    def test_get_and_set(self):
        store = MemoryStateStore()
        assert store.get("a1") is None
        store.set("a1", {"version": 1})
        assert store.get("a1") == {"version": 1}


class TestNavigatorConfig:
    def test_defaults(self):
        config = NavigatorConfig()
        assert config.default_max_ops == 20000
        assert config.default_stuck_value == 2
        assert config.report_max_cost_per_lifetick == 0.25
        assert config.report_max_repath_ratio == 0.2
        assert config.report_min_age == 20

    def test_from_params_coerces_strings(self):
        config = NavigatorConfig.from_params(default_max_ops="500", debug="2", track_region_status="false")
        assert config.default_max_ops == 500
        assert config.debug == 2
        assert config.track_region_status is False

    @pytest.mark.parametrize(
        "params",
        [
            {"default_max_ops": "0"},
            {"debug": 3},
            {"road_cost": 255},
            {"unknown_knob": 1},
        ],
    )
    def test_rejects_bad_params(self, params):
        with pytest.raises(ValidationError):
            NavigatorConfig.from_params(**params)

    def test_frozen(self):
        config = NavigatorConfig()
        with pytest.raises(ValidationError):
            config.debug = 2


class TestTravelOptions:
    def test_defaults(self):
        options = TravelOptions()
        assert options.ignore_creeps is True
        assert options.repath == 0.0
        assert options.use_find_route is None

    @pytest.mark.parametrize("params", [{"repath": 1.5}, {"range": -1}, {"max_ops": 0}, {"bogus": True}])
    def test_rejects_bad_values(self, params):
        with pytest.raises(ValidationError):
            TravelOptions(**params)
