"""Tests for the engine tracer (paytrack_engines/tracer.py)."""

from datetime import UTC, datetime
from decimal import Decimal

from paytrack_engines.tracer import compute_input_fingerprint, traced_engine
from paytrack_modules.payroll.models import TaxScale, TaxSettings


@traced_engine("demo", "2.1", fingerprint_fields=("gross", "scale"))
def _demo_engine(gross, scale, note=None):
    return gross * 2


class TestFingerprint:

    def test_deterministic(self):
        args = {"gross": Decimal("100.00"), "when": datetime(2024, 7, 1, tzinfo=UTC)}

        assert compute_input_fingerprint(("gross", "when"), args) == compute_input_fingerprint(
            ("gross", "when"), dict(args)
        )

    def test_trailing_zeros_normalised(self):
        assert compute_input_fingerprint(("x",), {"x": Decimal("100.00")}) == compute_input_fingerprint(
            ("x",), {"x": Decimal("100")}
        )

    def test_sensitive_to_dataclass_fields(self):
        claimed = compute_input_fingerprint(("s",), {"s": TaxSettings()})
        not_claimed = compute_input_fingerprint(
            ("s",), {"s": TaxSettings(claimed_tax_free_threshold=False)}
        )

        assert claimed != not_claimed

    def test_mapping_order_irrelevant(self):
        first = compute_input_fingerprint(("m",), {"m": {"a": 1, "b": 2}})
        second = compute_input_fingerprint(("m",), {"m": {"b": 2, "a": 1}})

        assert first == second

    def test_missing_field_is_null(self):
        assert len(compute_input_fingerprint(("absent",), {})) == 16


class TestTracedEngine:

    def test_returns_result_and_emits_trace(self, captured_logs):
        assert _demo_engine(Decimal("5"), TaxScale.NO_TFN) == Decimal("10")

        [trace] = [r for r in captured_logs() if r["message"] == "PAYTRACK_ENGINE_TRACE"]
        assert trace["engine_name"] == "demo"
        assert trace["engine_version"] == "2.1"
        assert trace["function"] == "_demo_engine"
        assert trace["duration_ms"] >= 0

    def test_positional_and_keyword_calls_share_fingerprint(self, captured_logs):
        _demo_engine(Decimal("5"), TaxScale.NO_TFN)
        _demo_engine(scale=TaxScale.NO_TFN, gross=Decimal("5"), note="ignored")

        first, second = [
            r["input_fingerprint"] for r in captured_logs() if r["message"] == "PAYTRACK_ENGINE_TRACE"
        ]
        assert first == second
