"""
Unit tests for config.py module.
"""

from datetime import date

import pytest
from pydantic import ValidationError as PydanticValidationError

from cashplan.aggregation import monthly_aggregate
from cashplan.config import (
    AllocationConfig,
    AppSettings,
    CardConfig,
    DatasetConfig,
    EngineConfig,
    InstallmentConfig,
    ObservedExpenseConfig,
    PlannedExpenseConfig,
    PlannedIncomeConfig,
    SavingGoalConfig,
)
from cashplan.exceptions import ValidationError
from cashplan.models import ObservedIncome, PlannedIncome, Recurrence, VariableBand


class TestEngineConfig:

    def test_defaults(self):
        config = EngineConfig()
        assert config.reporting_currency == "ARS"
        assert config.forecast_months == 3
        assert config.conservative_factor == 0.85
        assert config.optimistic_factor == 1.15
        assert config.previous_month_rule == "thirty_days"
        assert config.include_one_time is False

    def test_normalizer(self):
        config = EngineConfig(rates={"ARS": 1, "USD": 1200}, strict_currency=True)
        normalizer = config.normalizer()
        assert normalizer.rate_for("USD") == 1200.0
        assert normalizer.strict

    def test_reporting_currency_override_rebases_rates(self):
        normalizer = EngineConfig(reporting_currency="USD").normalizer()
        observed = [
            ObservedIncome(id="i1", source="ACME", category="salary", currency="ARS", amount=1_000, date=date(2025, 3, 5)),
            ObservedIncome(id="i2", source="ACME", category="salary", currency="USD", amount=1, date=date(2025, 3, 6)),
        ]
        [aggregate] = monthly_aggregate(observed, [], normalizer)
        assert aggregate.observed_total == pytest.approx(2.0)

    def test_rates_must_be_positive(self):
        with pytest.raises(PydanticValidationError, match="Rates must be > 0"):
            EngineConfig(rates={"USD": -1})

    def test_extra_fields_forbidden(self):
        with pytest.raises(PydanticValidationError):
            EngineConfig(unknown_option=True)

    def test_frozen(self):
        config = EngineConfig()
        with pytest.raises(PydanticValidationError):
            config.forecast_months = 12

    @pytest.mark.parametrize("field, value", [
        ("forecast_months", -1),
        ("conservative_factor", 1.5),
        ("optimistic_factor", 0.5),
        ("previous_month_rule", "lunar"),
    ])
    def test_ranges(self, field, value):
        with pytest.raises(PydanticValidationError):
            EngineConfig(**{field: value})

    def test_json_roundtrip(self):
        config = EngineConfig(forecast_months=6, rates={"ARS": 1, "BRL": 210})
        assert EngineConfig.model_validate_json(config.model_dump_json()) == config


class TestAllocationConfig:

    def test_to_options(self):
        options = AllocationConfig(round_to_multiple=1000).to_options()
        assert options.round_to_multiple == 1000.0
        assert options.priority_weights["high"] == 1.0

    def test_missing_priority(self):
        with pytest.raises(PydanticValidationError, match="missing"):
            AllocationConfig(priority_weights={"high": 1.0})

    def test_cap_range(self):
        with pytest.raises(PydanticValidationError):
            AllocationConfig(max_allocation_per_goal=1.2)


class TestInstallmentConfig:

    def test_default_routes(self):
        routes = InstallmentConfig().to_routes()
        assert [r.from_currency for r in routes] == ["USDT", "ARS"]

    def test_warning_before_urgent(self):
        with pytest.raises(PydanticValidationError, match="warning_days"):
            InstallmentConfig(urgent_days=5, warning_days=3)

    def test_route_rate_positive(self):
        with pytest.raises(PydanticValidationError):
            InstallmentConfig(routes=[{"from_currency": "USD", "rate": 0}])


# ============================================================================
# DATASET SCHEMA TESTS
# ============================================================================

class TestRecordConfigs:
    """Pydantic record schemas and their bridge to domain records."""

    def test_planned_income_to_record(self):
        config = PlannedIncomeConfig(
            id="p1", source="Clients", category="freelance", currency="USD",
            variable_band={"min": 100, "max": 300},
            recurrence={"type": "monthly", "day_rule": "fixed_day", "anchor_day": 15},
        )
        record = config.to_record()
        assert isinstance(record, PlannedIncome)
        assert record.variable_band == VariableBand(100, 300)
        assert record.recurrence == Recurrence("monthly", "fixed_day", 15)

    def test_amount_and_band_exclusive(self):
        with pytest.raises(PydanticValidationError, match="exactly one"):
            PlannedIncomeConfig(id="p1", category="c", currency="ARS")

    def test_band_order(self):
        with pytest.raises(PydanticValidationError):
            PlannedIncomeConfig(id="p1", category="c", currency="ARS", variable_band={"min": 5, "max": 1})

    def test_domain_validation_runs_on_to_record(self):
        config = PlannedExpenseConfig(id="e1", category="tech", currency="ARS", amount=100, kind="credit")
        with pytest.raises(ValidationError, match="card_id"):
            config.to_record()

    def test_credit_expense_to_record(self):
        record = PlannedExpenseConfig(
            id="e1", category="tech", currency="ARS", amount=100, kind="credit",
            card_id="visa", n_installments=3, date="2025-01-10",
        ).to_record()
        assert record.date == date(2025, 1, 10)
        assert record.n_installments == 3

    def test_observed_expense_date_parsed(self):
        record = ObservedExpenseConfig(
            id="o1", category="food", currency="ARS", amount=10, date="2025-03-01"
        ).to_record()
        assert record.date == date(2025, 3, 1)

    def test_card_currencies_tuple(self):
        card = CardConfig(id="visa", payment_day=10, currencies=["ARS", "USD"]).to_record()
        assert card.currencies == ("ARS", "USD")

    def test_goal_to_record(self):
        goal = SavingGoalConfig(
            id="g1", name="Trip", target_amount=1000, base_currency="USD", due_date="2025-12-31"
        ).to_record()
        assert goal.current_amount == 0.0
        assert goal.due_date == date(2025, 12, 31)

    def test_dataset(self, dataset_dict):
        dataset = DatasetConfig.model_validate(dataset_dict)
        assert len(dataset.planned_incomes) == 2
        assert dataset.paid_installments == ["inst_exp_laptop_1"]

    def test_dataset_rejects_unknown_section(self, dataset_dict):
        dataset_dict["accounts"] = []
        with pytest.raises(PydanticValidationError):
            DatasetConfig.model_validate(dataset_dict)


class TestAppSettings:

    def test_defaults(self, monkeypatch):
        for name in ("CASHPLAN_DEBUG", "CASHPLAN_LOG_LEVEL", "CASHPLAN_DATA_PATH",
                     "CASHPLAN_REPORTING_CURRENCY"):
            monkeypatch.delenv(name, raising=False)
        settings = AppSettings()
        assert settings.debug is False
        assert settings.log_level == "WARNING"
        assert settings.data_path is None

    def test_env_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CASHPLAN_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("CASHPLAN_DATA_PATH", str(tmp_path / "data.json"))
        monkeypatch.setenv("CASHPLAN_REPORTING_CURRENCY", "USD")
        settings = AppSettings()
        assert settings.log_level == "DEBUG"
        assert settings.data_path == tmp_path / "data.json"
        assert settings.reporting_currency == "USD"
