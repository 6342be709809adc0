"""Tests for batch calculation, presets and the indicator service."""

import asyncio
from typing import Optional, Sequence

import numpy as np
import pytest

from stockterm.schemas.indicators import (
    BatchErrorKind,
    BatchRequest,
    IndicatorCategory,
    IndicatorConfig,
    IndicatorRequest,
    IndicatorResult,
    OutputSpec,
)
from stockterm.schemas.market import Candle
from stockterm.services.base import (
    ParameterValidationError,
    UnknownIndicatorTypeError,
    UnknownPresetError,
)
from stockterm.services.indicators import (
    INDICATOR_GROUPS,
    INDICATOR_PRESETS,
    INDICATOR_REGISTRY,
    Indicator,
    IndicatorService,
    calculate_indicators,
    calculate_preset,
    create_indicator,
    get_indicator_config,
    get_indicator_service,
    get_preset,
    validate_indicator_params,
)
from stockterm.services.indicators.registry import BUILTIN_INDICATORS, IndicatorRegistry
from stockterm.services.indicators.service import result_keys


class Broken(Indicator):
    """Always fails, to check that a batch survives one bad item."""

    def __init__(self, **kwargs):
        super().__init__(
            IndicatorConfig(
                name="Broken",
                short_name="BRK",
                category=IndicatorCategory.OSCILLATOR,
                description="Raises on calculate",
                outputs=[OutputSpec(name="BRK", color="#000000")],
            ),
            **kwargs,
        )

    def calculate(self, candles: Sequence[Candle], params: Optional[dict] = None) -> IndicatorResult:
        raise ValueError("boom")


class TestCalculateIndicators:
    def test_keys_default_to_type(self, oscillating_candles):
        results = calculate_indicators(
            oscillating_candles,
            [("SMA", {"period": 20}), ("RSI", {"period": 14})],
        )
        assert list(results) == ["SMA", "RSI"]
        assert all(r.length == len(oscillating_candles) for r in results.values())

    def test_accepts_request_models_and_dicts(self, oscillating_candles):
        results = calculate_indicators(
            oscillating_candles,
            [
                IndicatorRequest(type="EMA", params={"period": 9}, label="fast"),
                {"type": "EMA", "params": {"period": 21}, "label": "slow"},
            ],
        )
        assert list(results) == ["fast", "slow"]

    def test_repeated_types_do_not_overwrite(self, oscillating_candles):
        results = calculate_indicators(
            oscillating_candles, [("EMA", {"period": 9}), ("EMA", {"period": 21}), ("EMA", None)]
        )
        assert list(results) == ["EMA", "EMA#2", "EMA#3"]

        fast, slow = results["EMA"].as_arrays()[0], results["EMA#2"].as_arrays()[0]
        assert np.isnan(fast[8:20]).sum() == 0
        assert np.isnan(slow[:20]).all()

    def test_unknown_type_raises(self, oscillating_candles):
        with pytest.raises(UnknownIndicatorTypeError):
            calculate_indicators(oscillating_candles, [("SMA", {}), ("Nope", {})])

    def test_custom_registry(self, oscillating_candles):
        registry = IndicatorRegistry({"SMA": BUILTIN_INDICATORS["SMA"]})
        assert list(calculate_indicators(oscillating_candles, [("SMA", {})], registry=registry)) == ["SMA"]

        with pytest.raises(UnknownIndicatorTypeError):
            calculate_indicators(oscillating_candles, [("RSI", {})], registry=registry)

    def test_result_keys(self):
        requests = [
            IndicatorRequest(type="SMA"),
            IndicatorRequest(type="SMA", label="SMA 50"),
            IndicatorRequest(type="SMA"),
        ]
        assert result_keys(requests) == ["SMA", "SMA 50", "SMA#2"]


class TestPresets:
    def test_all_preset_types_registered(self):
        for preset in INDICATOR_PRESETS.values():
            for request in preset.indicators:
                assert INDICATOR_REGISTRY.has(request.type), request.type

    def test_all_group_types_registered(self):
        for types in INDICATOR_GROUPS.values():
            assert all(INDICATOR_REGISTRY.has(t) for t in types)

    def test_preset_params_valid(self):
        for preset in INDICATOR_PRESETS.values():
            for request in preset.indicators:
                indicator = INDICATOR_REGISTRY.create(request.type)
                assert indicator.validate(indicator.resolve_params(request.params)).valid

    def test_day_trading(self, oscillating_candles):
        results = calculate_preset(oscillating_candles, "day_trading")
        assert list(results) == ["EMA 9", "EMA 21", "RSI", "MACD", "ATR"]

    @pytest.mark.parametrize("name", sorted(INDICATOR_PRESETS))
    def test_every_preset_runs(self, name, oscillating_candles):
        results = calculate_preset(oscillating_candles, name)
        assert len(results) == len(get_preset(name).indicators)

    def test_unknown_preset(self):
        with pytest.raises(UnknownPresetError) as exc_info:
            get_preset("yolo")
        assert isinstance(exc_info.value, KeyError)
        assert "day_trading" in exc_info.value.details["available"]


class TestIndicatorService:
    def test_execute_collects_errors(self, oscillating_candles):
        service = IndicatorService()
        request = BatchRequest(
            candles=oscillating_candles,
            indicators=[
                IndicatorRequest(type="SMA", params={"period": 10}),
                IndicatorRequest(type="Foo"),
                IndicatorRequest(type="RSI", params={"period": 1}),
                IndicatorRequest(type="MACD"),
            ],
        )
        response = asyncio.run(service.execute(request))

        assert list(response.results) == ["SMA", "MACD"]
        assert not response.ok
        kinds = {e.key: e.kind for e in response.errors}
        assert kinds == {"Foo": BatchErrorKind.UNKNOWN_TYPE, "RSI": BatchErrorKind.VALIDATION}

        rsi_error = next(e for e in response.errors if e.key == "RSI")
        assert rsi_error.errors == ["Parameter period must be >= 2"]

    def test_execute_survives_calculation_error(self, oscillating_candles):
        registry = IndicatorRegistry(BUILTIN_INDICATORS)
        registry.register("Broken", Broken)
        service = IndicatorService(registry=registry)

        response = asyncio.run(
            service.execute(
                BatchRequest(
                    candles=oscillating_candles,
                    indicators=[IndicatorRequest(type="Broken"), IndicatorRequest(type="ATR")],
                )
            )
        )

        assert list(response.results) == ["ATR"]
        assert response.errors[0].kind == BatchErrorKind.CALCULATION
        assert response.errors[0].errors == ["boom"]

    def test_execute_runs_validate_input_hook(self, oscillating_candles):
        class OverlaysOnly(IndicatorService):
            async def validate_input(self, input_data: BatchRequest) -> BatchRequest:
                kept = [r for r in input_data.indicators if r.type != "RSI"]
                return input_data.model_copy(update={"indicators": kept})

        request = BatchRequest(
            candles=oscillating_candles,
            indicators=[IndicatorRequest(type="RSI"), IndicatorRequest(type="SMA")],
        )
        response = asyncio.run(OverlaysOnly().execute(request))

        assert list(response.results) == ["SMA"]
        assert response.ok

    def test_strict_calculate(self, oscillating_candles):
        service = IndicatorService()

        with pytest.raises(ParameterValidationError) as exc_info:
            service.calculate("RSI", oscillating_candles, {"period": 1}, strict=True)
        assert exc_info.value.errors == ["Parameter period must be >= 2"]

        # Validation is advisory on the default path
        result = service.calculate("RSI", oscillating_candles, {"period": 1})
        assert result.length == len(oscillating_candles)

    def test_instances_and_cache_reused(self, oscillating_candles):
        service = IndicatorService()
        first = service.calculate("SMA", oscillating_candles, {"period": 5})
        second = service.calculate("SMA", oscillating_candles, {"period": 5})

        assert service.get_indicator("SMA") is service.get_indicator("SMA")
        assert second is first

        service.clear_caches()
        assert service.calculate("SMA", oscillating_candles, {"period": 5}) is not first

    def test_health_and_name(self):
        service = IndicatorService()
        assert asyncio.run(service.health_check()) is True
        assert service.name == "IndicatorService"

    def test_singleton(self):
        assert get_indicator_service() is get_indicator_service()


class TestHelpers:
    def test_create_indicator(self):
        assert create_indicator("RSI").get_config().short_name == "RSI"
        with pytest.raises(UnknownIndicatorTypeError):
            create_indicator("NotARealType")

    def test_get_indicator_config(self):
        config = get_indicator_config("KeltnerChannels")
        assert [p.name for p in config.params] == ["period", "atrPeriod", "multiplier"]

    def test_validate_indicator_params_does_not_fill_defaults(self):
        result = validate_indicator_params("SMA", {"period": 5})
        assert not result.valid
        assert result.errors == ["Missing required parameter: source"]

        assert validate_indicator_params("SMA", {"period": 5, "source": "hlc3"}).valid
