"""Tests for the forward and policy-mode sequestration calculator."""

import math

import pytest
from pydantic import ValidationError

from bluecarbon.carbon.calculator import (
    _round_half_up,
    buffer_factor,
    build_calculation_record,
    calculate_required_area,
    calculate_sequestration,
    resolve_ecosystem,
    sequestration_factor,
)
from bluecarbon.carbon.models import BufferSet, EcosystemType
from bluecarbon.utils import InvalidInput


class TestBufferFactor:
    def test_default_buffers(self):
        assert math.isclose(buffer_factor(), 0.70)

    def test_dict_buffers(self):
        assert math.isclose(buffer_factor({"uncertainty": 0, "mortality": 0, "verification": 0}), 1.0)

    def test_sum_of_100_rejected(self):
        with pytest.raises(InvalidInput):
            buffer_factor(BufferSet(uncertainty=50, mortality=40, verification=10))

    def test_sum_above_100_rejected(self):
        with pytest.raises(InvalidInput):
            buffer_factor(BufferSet(uncertainty=60, mortality=40, verification=10))

    def test_negative_buffer_rejected(self):
        with pytest.raises(InvalidInput):
            buffer_factor(BufferSet(uncertainty=-5))


class TestEcosystemLookup:
    @pytest.mark.parametrize("tag,rate", [
        ("mangrove", 10.15),
        ("seagrass", 8.7),
        ("salt_marsh", 6.8),
        ("kelp_forest", 12.3),
    ])
    def test_factor_defined_for_every_ecosystem(self, tag, rate):
        assert sequestration_factor(tag) == rate
        assert sequestration_factor(EcosystemType(tag)) == rate

    def test_unknown_ecosystem_rejected(self):
        with pytest.raises(InvalidInput):
            resolve_ecosystem("coral_reef")

    def test_invalid_input_is_value_error(self):
        with pytest.raises(ValueError):
            calculate_sequestration(1000, "tundra")


class TestForwardMode:
    def test_mangrove_ten_hectares(self):
        result = calculate_sequestration(100_000, "mangrove", years=20)
        assert result.annual_absorption == 71.05
        assert result.cumulative_absorption == 1421.0
        assert result.equivalences.cars_removed == 32
        assert result.equivalences.homes_powered == 9
        assert result.equivalences.trees_planted == 22736
        assert result.policy_area_needed is None

    def test_horizon_defaults_to_twenty_years(self):
        assert calculate_sequestration(100_000, "mangrove") == calculate_sequestration(100_000, "mangrove", 20)

    def test_zero_buffers_use_gross_rate(self):
        result = calculate_sequestration(10_000, "kelp_forest", 1, BufferSet(uncertainty=0, mortality=0, verification=0))
        assert result.annual_absorption == 12.3
        assert result.cumulative_absorption == 12.3

    @pytest.mark.parametrize("area,years,ecosystem", [
        (100_000, 20, "mangrove"),
        (12_345, 7, "seagrass"),
        (987_654, 33, "salt_marsh"),
        (1_500, 1, "kelp_forest"),
        (4_200_000, 50, "mangrove"),
    ])
    def test_cumulative_equals_annual_times_years(self, area, years, ecosystem):
        result = calculate_sequestration(area, ecosystem, years)
        # Both figures are rounded to 2 dp from the same unrounded annual value
        assert abs(result.cumulative_absorption - result.annual_absorption * years) <= 0.005 * years + 0.005

    def test_monotonic_in_area(self):
        areas = [1, 500, 1_000, 9_999, 10_000, 250_000, 1_000_000]
        annuals = [calculate_sequestration(a, "seagrass").annual_absorption for a in areas]
        assert annuals == sorted(annuals)

    @pytest.mark.parametrize("name", ["uncertainty", "mortality", "verification"])
    def test_monotonic_in_each_buffer(self, name):
        annuals = []
        for pct in (0, 5, 10, 25, 40, 60):
            buffers = BufferSet(**{"uncertainty": 0, "mortality": 0, "verification": 0, name: pct})
            annuals.append(calculate_sequestration(200_000, "mangrove", 20, buffers).annual_absorption)
        assert annuals == sorted(annuals, reverse=True)

    @pytest.mark.parametrize("area", [0, -1, -100_000])
    def test_non_positive_area_rejected(self, area):
        with pytest.raises(InvalidInput):
            calculate_sequestration(area, "mangrove")

    @pytest.mark.parametrize("years", [0, -5])
    def test_non_positive_horizon_rejected(self, years):
        with pytest.raises(InvalidInput):
            calculate_sequestration(100_000, "mangrove", years)

    def test_degenerate_buffers_rejected(self):
        with pytest.raises(InvalidInput):
            calculate_sequestration(100_000, "mangrove", 20, {"uncertainty": 40, "mortality": 40, "verification": 20})


class TestPolicyMode:
    def test_seagrass_thousand_tons(self):
        result = calculate_required_area(1000, "seagrass", years=20)
        assert result.policy_area_needed == 82102
        # Equivalences follow the target, not the computed area
        assert result.equivalences.cars_removed == 23  # 22.5 rounds half up
        assert result.equivalences.homes_powered == 6
        assert result.equivalences.trees_planted == 16000
        assert result.annual_absorption == 50.0
        assert result.cumulative_absorption == 1000.0

    @pytest.mark.parametrize("area,ecosystem", [
        (100_000, "mangrove"),
        (50_000, "seagrass"),
        (20_000, "salt_marsh"),
        (30_000, "kelp_forest"),
        (1_000_000, "mangrove"),
        (12_345, "seagrass"),
        (987_654, "salt_marsh"),
        (33_333, "mangrove"),
        (77_777, "salt_marsh"),
        (4_200_123, "kelp_forest"),
    ])
    def test_round_trip_recovers_area(self, area, ecosystem):
        forward = calculate_sequestration(area, ecosystem, 20)
        inverse = calculate_required_area(forward.cumulative_absorption, ecosystem, 20)
        assert abs(inverse.policy_area_needed - area) <= 1

    @pytest.mark.parametrize("target", [0, -10])
    def test_non_positive_target_rejected(self, target):
        with pytest.raises(InvalidInput):
            calculate_required_area(target, "mangrove")

    def test_degenerate_buffers_rejected(self):
        with pytest.raises(InvalidInput):
            calculate_required_area(1000, "mangrove", 20, BufferSet(uncertainty=100, mortality=0, verification=0))

    def test_zero_horizon_rejected(self):
        with pytest.raises(InvalidInput):
            calculate_required_area(1000, "mangrove", 0)


class TestRounding:
    def test_half_rounds_up(self):
        assert _round_half_up(4.5) == 5
        assert _round_half_up(0.125, 2) == 0.13

    def test_cumulative_uses_unrounded_annual(self):
        # 1.2345 ha seagrass nets 7.518105 t/yr; 20 yr is 150.3621 t, not 7.52 * 20
        result = calculate_sequestration(12_345, "seagrass", 20)
        assert result.annual_absorption == 7.52
        assert result.cumulative_absorption == 150.36


class TestNonFiniteInputs:
    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_area_rejected(self, value):
        with pytest.raises(InvalidInput):
            calculate_sequestration(value, "mangrove")

    @pytest.mark.parametrize("value", [float("inf"), float("nan")])
    def test_target_rejected(self, value):
        with pytest.raises(InvalidInput):
            calculate_required_area(value, "seagrass")

    @pytest.mark.parametrize("name", ["uncertainty", "mortality", "verification"])
    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_buffer_dict_rejected(self, name, value):
        with pytest.raises(InvalidInput):
            calculate_sequestration(100_000, "mangrove", 20, {name: value})

    def test_buffer_model_rejects_nan(self):
        with pytest.raises(ValidationError):
            BufferSet(mortality=float("nan"))

    def test_constructed_nan_buffer_rejected(self):
        buffers = BufferSet.model_construct(uncertainty=float("nan"), mortality=15.0, verification=5.0)
        with pytest.raises(InvalidInput):
            buffer_factor(buffers)


class TestCalculationRecord:
    def test_record_fields(self):
        record = build_calculation_record(100_000, "mangrove", 20)
        assert record.annual_co2_absorption == 71.05
        assert record.cumulative_co2_absorption == 1421.0
        assert record.sequestration_factor == 10.15
        assert record.buffer_percentage == 30.0
