"""
Tests for the YAML tax table loader and payroll settings.

Covers:
- The bundled tax tables load, are cached and feed the withholding engine
- Checksums are deterministic and content-sensitive
- Malformed table files are rejected
- Payroll settings loading
"""

import dataclasses
import textwrap
from decimal import Decimal

import pytest
import yaml

from paytrack_config import (
    DEFAULT_TAX_TABLES_DIR,
    clear_cache,
    compute_checksum,
    get_tax_tables,
    load_payroll_config,
    load_tax_tables,
)
from paytrack_config.loader import merge_tax_tables
from paytrack_engines.withholding import compute_withholding
from paytrack_modules.payroll.config import PayrollConfig
from paytrack_modules.payroll.models import StslScale, TaxScale, TaxTables

VALID_DOCUMENT = """\
tax_year: "2024-25"
rate_config:
  medicare_rate: "0.02"
  medicare_low_income_threshold: "26000"
  medicare_high_income_threshold: "32500"
coefficients:
  threshold-claimed:
    - {up_to: "361", a: "0", b: "0"}
    - {a: "0.19", b: "68.5900"}
"""


def _write(directory, name, body):
    path = directory / name
    path.write_text(textwrap.dedent(body))
    return path


@pytest.fixture(autouse=True)
def _fresh_cache():
    clear_cache()
    yield
    clear_cache()


class TestBundledTables:

    def test_years_and_scales(self):
        tables = get_tax_tables()

        assert tables.tax_years == ("2024-25", "2025-26")
        for year in tables.tax_years:
            scales = {c.scale for c in tables.coefficients if c.tax_year == year}
            stsl = {r.scale for r in tables.stsl_rates if r.tax_year == year}
            assert scales == set(TaxScale)
            assert stsl == set(StslScale)

    def test_brackets_are_contiguous(self):
        tables = get_tax_tables()

        for year in tables.tax_years:
            for scale in TaxScale:
                rows = sorted(
                    (c for c in tables.coefficients if c.tax_year == year and c.scale == scale),
                    key=lambda c: c.earnings_from,
                )
                assert rows[0].earnings_from == 0
                assert rows[-1].earnings_to is None
                for previous, current in zip(rows, rows[1:]):
                    assert previous.earnings_to == current.earnings_from

    def test_cached_per_directory(self, captured_logs):
        first = get_tax_tables()
        second = get_tax_tables(DEFAULT_TAX_TABLES_DIR)

        assert first is second
        traces = [r for r in captured_logs() if r["message"] == "PAYTRACK_CONFIG_TRACE"]
        assert len(traces) == 1
        assert traces[0]["checksum"] == compute_checksum(first)

    def test_scale_two_weekly_withholding(self):
        tables = get_tax_tables()

        result = compute_withholding(
            Decimal("1000.00"),
            TaxScale.THRESHOLD_CLAIMED,
            tables.coefficients,
            tables.rate_config_for("2024-25"),
            tables.stsl_rates,
            stsl_scale=StslScale.WITH_TFT_OR_FOREIGN_RESIDENT,
        )

        # 0.3227 x 1000 - 180.0385
        assert result.payg_withholding == Decimal("142.66")
        # (1000 + 0.99) sits below the 2024-25 repayment threshold
        assert result.hecs_help_amount == Decimal("0.00")

    @pytest.mark.parametrize(
        "weekly, stsl_scale, expected",
        [
            # 0.035 x 1500.99 = 52.53
            ("1500.00", StslScale.WITH_TFT_OR_FOREIGN_RESIDENT, "52.00"),
            # 1210.99 is past the 1,209 edge: 0.02 x 1210.99 = 24.22
            ("1210.00", StslScale.WITH_TFT_OR_FOREIGN_RESIDENT, "24.00"),
            # 1208.99 stays in the 1% band
            ("1208.00", StslScale.WITH_TFT_OR_FOREIGN_RESIDENT, "12.00"),
            # 0.10 x 3200.99 = 320.10
            ("3200.00", StslScale.WITH_TFT_OR_FOREIGN_RESIDENT, "320.00"),
            # no tax-free threshold: 1,176 to 1,267 is the 4% band
            ("1200.00", StslScale.NO_TFT, "48.00"),
        ],
    )
    def test_stsl_percentage_bands_for_2024_25(self, weekly, stsl_scale, expected):
        tables = get_tax_tables()

        result = compute_withholding(
            Decimal(weekly),
            TaxScale.THRESHOLD_CLAIMED,
            tables.coefficients,
            tables.rate_config_for("2024-25"),
            tables.stsl_rates,
            stsl_scale=stsl_scale,
        )

        assert result.hecs_help_amount == Decimal(expected)

    def test_stsl_marginal_rates_from_2025_26(self):
        tables = get_tax_tables()

        result = compute_withholding(
            Decimal("1500.00"),
            TaxScale.THRESHOLD_CLAIMED,
            tables.coefficients,
            tables.rate_config_for("2025-26"),
            tables.stsl_rates,
            stsl_scale=StslScale.WITH_TFT_OR_FOREIGN_RESIDENT,
        )

        # 0.15 x 1500.99 - 193.20 = 31.9485, rounded down
        assert result.hecs_help_amount == Decimal("31.00")


class TestChecksum:

    def test_deterministic_and_order_independent(self):
        tables = load_tax_tables(DEFAULT_TAX_TABLES_DIR)
        shuffled = TaxTables(
            coefficients=tuple(reversed(tables.coefficients)),
            stsl_rates=tuple(reversed(tables.stsl_rates)),
            rate_configs=tuple(reversed(tables.rate_configs)),
        )

        assert compute_checksum(tables) == compute_checksum(shuffled)
        assert len(compute_checksum(tables)) == 64

    def test_changes_with_content(self):
        tables = load_tax_tables(DEFAULT_TAX_TABLES_DIR)
        first, *rest = tables.coefficients
        edited = dataclasses.replace(
            tables,
            coefficients=(dataclasses.replace(first, coefficient_b=first.coefficient_b + 1), *rest),
        )

        assert compute_checksum(edited) != compute_checksum(tables)

    def test_trailing_zeros_do_not_matter(self):
        tables = load_tax_tables(DEFAULT_TAX_TABLES_DIR)
        first, *rest = tables.coefficients
        padded = dataclasses.replace(
            tables,
            coefficients=(
                dataclasses.replace(first, coefficient_a=first.coefficient_a.quantize(Decimal("0.000001"))),
                *rest,
            ),
        )

        assert compute_checksum(padded) == compute_checksum(tables)


class TestMalformedTables:

    def test_valid_custom_directory(self, tmp_path):
        _write(tmp_path, "2024-25.yaml", VALID_DOCUMENT)

        tables = get_tax_tables(tmp_path)

        assert [c.earnings_from for c in tables.coefficients] == [Decimal("0"), Decimal("361")]
        assert tables.stsl_rates == ()

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_tax_tables(tmp_path / "nowhere")

    def test_empty_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_tax_tables(tmp_path)

    def test_file_name_must_match_year(self, tmp_path):
        _write(tmp_path, "2023-24.yaml", VALID_DOCUMENT)

        with pytest.raises(ValueError, match="declares tax year"):
            load_tax_tables(tmp_path)

    def test_unquoted_float_rejected(self, tmp_path):
        _write(tmp_path, "2024-25.yaml", VALID_DOCUMENT.replace('a: "0.19"', "a: 0.19"))

        with pytest.raises(ValueError, match="must be quoted"):
            load_tax_tables(tmp_path)

    def test_open_bracket_must_be_last(self, tmp_path):
        body = VALID_DOCUMENT.replace('{up_to: "361", a: "0", b: "0"}', '{a: "0", b: "0"}')
        _write(tmp_path, "2024-25.yaml", body)

        with pytest.raises(ValueError, match="open-ended"):
            load_tax_tables(tmp_path)

    def test_last_bracket_must_be_open(self, tmp_path):
        body = VALID_DOCUMENT.replace('{a: "0.19", b: "68.5900"}', '{up_to: "9000", a: "0.19", b: "68.5900"}')
        _write(tmp_path, "2024-25.yaml", body)

        with pytest.raises(ValueError, match="open-ended"):
            load_tax_tables(tmp_path)

    def test_unknown_scale(self, tmp_path):
        _write(tmp_path, "2024-25.yaml", VALID_DOCUMENT.replace("threshold-claimed", "scale9"))

        with pytest.raises(ValueError):
            load_tax_tables(tmp_path)

    def test_invalid_yaml(self, tmp_path):
        _write(tmp_path, "2024-25.yaml", "tax_year: [unclosed\n")

        with pytest.raises(yaml.YAMLError):
            load_tax_tables(tmp_path)

    def test_duplicate_year_on_merge(self):
        tables = load_tax_tables(DEFAULT_TAX_TABLES_DIR)

        with pytest.raises(ValueError, match="defined twice"):
            merge_tax_tables([tables, tables])


class TestPayrollSettings:

    def test_bundled_settings_are_the_defaults(self):
        assert load_payroll_config() == PayrollConfig()

    def test_overrides(self, tmp_path):
        path = _write(
            tmp_path,
            "payroll.yaml",
            """\
            payroll:
              default_timezone: Australia/Perth
              strict_negative_guard: true
            """,
        )

        config = load_payroll_config(path)

        assert config.default_timezone == "Australia/Perth"
        assert config.strict_negative_guard is True
        assert config.overtime_tier_minutes == 180

    def test_unknown_key(self, tmp_path):
        path = _write(tmp_path, "payroll.yaml", "overtime_minutes: 120\n")

        with pytest.raises(ValueError, match="Unknown payroll config keys"):
            load_payroll_config(path)

    def test_invalid_timezone(self, tmp_path):
        path = _write(tmp_path, "payroll.yaml", "default_timezone: Mars/Olympus\n")

        with pytest.raises(ValueError, match="Unknown timezone"):
            load_payroll_config(path)
