"""Payroll rule configuration.

Explicit configuration for pay calculation. Nothing here reads the
environment; a ``PayrollConfig`` is built once and handed to each calculator.

Pattern:
    config = PayrollConfig(
        tax=TaxConfig(periods_per_year=52),
        overtime=OvertimeConfig(threshold_hours=Decimal("40")),
    )
    calculator = TaxWithholdingCalculator(config.tax)

Rules are also loadable from the JSON rule payload shape:
    {
        "tax": {
            "periods_per_year": 26,
            "standard_deduction": 13850,
            "brackets": [{"min": 0, "max": 12532, "rate": 0}, ...],
            "social_security": {"rate": 0.062, "wage_base_limit": 168600},
            "medicare": {"rate": 0.0145}
        },
        "overtime": {"threshold_hours": 40, "multiplier": 1.5, "window": "week"},
        "differential": {"night_start_hour": 22, "night_end_hour": 6},
        "default_hourly_rate": 20.00,
        "agency_timezone": "America/Chicago",
        "check_number_start": 1000
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


@dataclass(frozen=True)
class TaxBracket:
    """Annual progressive tax band. ``max_amount`` of None means no upper limit."""

    min_amount: Decimal
    max_amount: Decimal | None
    rate: Decimal

    def __post_init__(self) -> None:
        if self.rate < 0 or self.rate > 1:
            raise ValueError("bracket rate must be between 0 and 1")
        if self.max_amount is not None and self.max_amount <= self.min_amount:
            raise ValueError("bracket max_amount must exceed min_amount")


# Simplified 2024 single-filer table, annual amounts.
REFERENCE_FEDERAL_BRACKETS: tuple[TaxBracket, ...] = (
    TaxBracket(Decimal("0"), Decimal("12532"), Decimal("0")),
    TaxBracket(Decimal("12532"), Decimal("51792"), Decimal("0.10")),
    TaxBracket(Decimal("51792"), Decimal("172328"), Decimal("0.12")),
    TaxBracket(Decimal("172328"), Decimal("499720"), Decimal("0.22")),
    TaxBracket(Decimal("499720"), Decimal("1072188"), Decimal("0.24")),
    TaxBracket(Decimal("1072188"), None, Decimal("0.32")),
)


@dataclass(frozen=True)
class TaxConfig:
    """
    Federal income tax and FICA configuration.

    Attributes:
        periods_per_year: Pay periods used to annualize period gross. Default 26.
        standard_deduction: Annual standard deduction subtracted before brackets.
        brackets: Annual progressive bracket table.
        social_security_rate: Flat employee rate. Default 6.2%.
        social_security_wage_base: Annual wage base; period wages above
            ``wage_base / periods_per_year`` are not taxed.
        medicare_rate: Flat employee rate, uncapped. Default 1.45%.
    """

    periods_per_year: int = 26
    standard_deduction: Decimal = Decimal("13850")
    brackets: tuple[TaxBracket, ...] = REFERENCE_FEDERAL_BRACKETS
    social_security_rate: Decimal = Decimal("0.062")
    social_security_wage_base: Decimal = Decimal("168600")
    medicare_rate: Decimal = Decimal("0.0145")

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.periods_per_year < 1:
            raise ValueError("periods_per_year must be at least 1")
        if self.standard_deduction < 0:
            raise ValueError("standard_deduction cannot be negative")
        if not self.brackets:
            raise ValueError("at least one tax bracket is required")
        for rate in (self.social_security_rate, self.medicare_rate):
            if rate < 0 or rate > 1:
                raise ValueError("FICA rates must be between 0 and 1")
        if self.social_security_wage_base <= 0:
            raise ValueError("social_security_wage_base must be positive")


@dataclass(frozen=True)
class OvertimeConfig:
    """
    Overtime split configuration.

    Attributes:
        threshold_hours: Regular hours allowed per window before overtime.
        multiplier: Pay multiplier applied to overtime hours.
        window: "week" resets the threshold every ISO calendar week;
            "period" applies one threshold across the whole pay period.
    """

    threshold_hours: Decimal = Decimal("40")
    multiplier: Decimal = Decimal("1.5")
    window: str = "week"

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.threshold_hours <= 0:
            raise ValueError("threshold_hours must be positive")
        if self.multiplier < 1:
            raise ValueError("multiplier must be at least 1")
        if self.window not in {"week", "period"}:
            raise ValueError("window must be 'week' or 'period'")

    @property
    def threshold_minutes(self) -> int:
        return int(self.threshold_hours * 60)


@dataclass(frozen=True)
class DifferentialConfig:
    """Weekend and night tagging. Night runs from ``night_start_hour`` to ``night_end_hour``."""

    night_start_hour: int = 22
    night_end_hour: int = 6
    weekend_days: frozenset[int] = frozenset({5, 6})  # Saturday, Sunday

    def __post_init__(self) -> None:
        """Validate configuration."""
        for hour in (self.night_start_hour, self.night_end_hour):
            if not 0 <= hour <= 23:
                raise ValueError("night hours must be between 0 and 23")

    def is_night_hour(self, hour: int) -> bool:
        if self.night_start_hour > self.night_end_hour:
            return hour >= self.night_start_hour or hour < self.night_end_hour
        return self.night_start_hour <= hour < self.night_end_hour


@dataclass(frozen=True)
class PayrollConfig:
    """
    Complete rule set for one payroll engine instance.

    Attributes:
        tax: Withholding configuration.
        overtime: Overtime split configuration.
        differential: Weekend/night tagging.
        default_hourly_rate: Rate used when a caregiver has no rate on file.
        agency_timezone: IANA zone used for period windows and tagging.
        check_number_start: Counter seed; the first check issued is start + 1.
    """

    tax: TaxConfig = field(default_factory=TaxConfig)
    overtime: OvertimeConfig = field(default_factory=OvertimeConfig)
    differential: DifferentialConfig = field(default_factory=DifferentialConfig)
    default_hourly_rate: Decimal = Decimal("20.00")
    agency_timezone: str = "UTC"
    check_number_start: int = 1000

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.default_hourly_rate < 0:
            raise ValueError("default_hourly_rate cannot be negative")
        if self.check_number_start < 0:
            raise ValueError("check_number_start cannot be negative")
        try:
            ZoneInfo(self.agency_timezone)
        except ZoneInfoNotFoundError as exc:
            raise ValueError(f"unknown agency_timezone '{self.agency_timezone}'") from exc

    @property
    def timezone(self) -> ZoneInfo:
        return ZoneInfo(self.agency_timezone)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> PayrollConfig:
        """Build a config from a JSON rule payload, keeping defaults for missing keys."""
        kwargs: dict[str, Any] = {}

        tax_payload = payload.get("tax")
        if tax_payload is not None:
            kwargs["tax"] = _parse_tax(tax_payload)

        overtime_payload = payload.get("overtime")
        if overtime_payload is not None:
            overtime_kwargs: dict[str, Any] = {}
            if "threshold_hours" in overtime_payload:
                overtime_kwargs["threshold_hours"] = _dec(overtime_payload["threshold_hours"])
            if "multiplier" in overtime_payload:
                overtime_kwargs["multiplier"] = _dec(overtime_payload["multiplier"])
            if "window" in overtime_payload:
                overtime_kwargs["window"] = overtime_payload["window"]
            kwargs["overtime"] = OvertimeConfig(**overtime_kwargs)

        differential_payload = payload.get("differential")
        if differential_payload is not None:
            differential_kwargs: dict[str, Any] = {}
            for key in ("night_start_hour", "night_end_hour"):
                if key in differential_payload:
                    differential_kwargs[key] = int(differential_payload[key])
            if "weekend_days" in differential_payload:
                differential_kwargs["weekend_days"] = frozenset(
                    int(d) for d in differential_payload["weekend_days"]
                )
            kwargs["differential"] = DifferentialConfig(**differential_kwargs)

        if "default_hourly_rate" in payload:
            kwargs["default_hourly_rate"] = _dec(payload["default_hourly_rate"])
        if "agency_timezone" in payload:
            kwargs["agency_timezone"] = payload["agency_timezone"]
        if "check_number_start" in payload:
            kwargs["check_number_start"] = int(payload["check_number_start"])

        return cls(**kwargs)


def _dec(value: Any) -> Decimal:
    return Decimal(str(value))


def _parse_tax(payload: dict[str, Any]) -> TaxConfig:
    kwargs: dict[str, Any] = {}
    if "periods_per_year" in payload:
        kwargs["periods_per_year"] = int(payload["periods_per_year"])
    if "standard_deduction" in payload:
        kwargs["standard_deduction"] = _dec(payload["standard_deduction"])
    if "brackets" in payload:
        kwargs["brackets"] = tuple(
            TaxBracket(
                min_amount=_dec(b["min"]),
                max_amount=_dec(b["max"]) if b.get("max") is not None else None,
                rate=_dec(b["rate"]),
            )
            for b in payload["brackets"]
        )
    social_security = payload.get("social_security", {})
    if "rate" in social_security:
        kwargs["social_security_rate"] = _dec(social_security["rate"])
    if "wage_base_limit" in social_security:
        kwargs["social_security_wage_base"] = _dec(social_security["wage_base_limit"])
    medicare = payload.get("medicare", {})
    if "rate" in medicare:
        kwargs["medicare_rate"] = _dec(medicare["rate"])
    return TaxConfig(**kwargs)


def load_payroll_config(path: str | Path | None) -> PayrollConfig:
    """Load rules from a JSON file, or the reference defaults when no path is given."""
    if path is None:
        return PayrollConfig()
    with open(path, encoding="utf-8") as f:
        return PayrollConfig.from_dict(json.load(f))
