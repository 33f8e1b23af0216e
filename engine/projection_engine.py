"""Scenario growth projection.

Turns a fully allocated ``AllocationSet`` into per-scenario projections:
weighted annual return, compounded cumulative return, and the ending value
of an initial lump sum plus monthly contributions.

Rates stay fractional until the final percentage conversion.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable

import numpy as np
import pandas as pd

from policy.return_policy import DEFAULT_RATE
from policy.types import Scenario
from portfolio.allocation import AllocationSet

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class ProjectionResult:
    """Projection for one scenario."""

    annual_return_percent: float
    cumulative_return_percent: float
    projected_value: float

    @classmethod
    def zero(cls) -> ProjectionResult:
        return cls(0.0, 0.0, 0.0)


def parse_horizon(value: Any) -> int:
    """Parse a horizon selector value into whole years.

    Reads a leading integer the way a selector value like ``"10"`` or
    ``"40"`` is read. Non-numeric or negative input gives 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        if not math.isfinite(value) or value < 0:
            return 0
        return int(value)
    m = _LEADING_INT.match(str(value))
    if not m:
        return 0
    years = int(m.group(1))
    return years if years > 0 else 0


def non_negative(value: Any) -> float:
    """Return ``value`` as a finite float >= 0, or 0.0 if it is not one."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(v) or v < 0:
        return 0.0
    return v


def growth_factor(rate: float, periods: int) -> float:
    """``(1 + rate) ** periods``, saturating to infinity instead of raising."""
    base = 1 + rate
    try:
        return base ** periods
    except OverflowError:
        if base < 0 and periods % 2:
            return -math.inf
        return math.inf


def weighted_return(allocation: AllocationSet, scenario: Scenario, default_rate: float = DEFAULT_RATE) -> float:
    return sum((e.weight / 100.0) * scenario.rate_for(e.id, default_rate) for e in allocation.entries)


def contribution_value(monthly: float, annual_rate: float, years: int) -> float:
    """Future value of monthly contributions made at the start of each month."""
    n = MONTHS_PER_YEAR * years
    r_m = annual_rate / MONTHS_PER_YEAR
    if monthly == 0:
        return 0.0
    if r_m == 0:
        return monthly * n
    return monthly * (growth_factor(r_m, n) - 1) / r_m * (1 + r_m)


def projected_value(initial: float, monthly: float, annual_rate: float, years: int) -> float:
    if years == 0:
        return initial
    lump = initial * growth_factor(annual_rate, years) if initial else 0.0
    return lump + contribution_value(monthly, annual_rate, years)


def project_scenario(
    allocation: AllocationSet,
    scenario: Scenario,
    risk_multiplier: float = 1.0,
    years: Any = 0,
    initial: Any = 0.0,
    monthly: Any = 0.0,
    default_rate: float = DEFAULT_RATE,
) -> ProjectionResult:
    """Project one scenario. Returns zeros unless the allocation totals 100."""
    if not allocation.is_fully_allocated():
        logger.debug(f"Allocation total {allocation.total:g} != 100, {scenario.name} not computed")
        return ProjectionResult.zero()

    y = parse_horizon(years)
    p0 = non_negative(initial)
    c = non_negative(monthly)

    r = weighted_return(allocation, scenario, default_rate) * float(risk_multiplier)
    cumulative = (growth_factor(r, y) - 1) * 100 if y > 0 else 0.0

    return ProjectionResult(
        annual_return_percent=r * 100,
        cumulative_return_percent=cumulative,
        projected_value=projected_value(p0, c, r, y),
    )


def project(
    allocation: AllocationSet,
    scenarios: Iterable[Scenario],
    risk_multiplier: float = 1.0,
    years: Any = 0,
    initial: Any = 0.0,
    monthly: Any = 0.0,
    default_rate: float = DEFAULT_RATE,
) -> Dict[str, ProjectionResult]:
    """Project every scenario independently against the same snapshot.

    Args:
        allocation: Current allocation snapshot.
        scenarios: Named per-asset return tables.
        risk_multiplier: Scalar applied to the weighted return.
        years: Horizon selector value, parsed with ``parse_horizon``.
        initial: Lump sum invested at the start.
        monthly: Contribution made at the start of every month.
        default_rate: Rate for asset ids a scenario does not list.

    Returns:
        Map of scenario name -> ProjectionResult, in scenario order.
    """
    return {
        s.name: project_scenario(allocation, s, risk_multiplier, years, initial, monthly, default_rate)
        for s in scenarios
    }


def value_schedule(annual_rate: float, years: Any, initial: Any = 0.0, monthly: Any = 0.0) -> pd.Series:
    """Projected value at the end of each year 0..years.

    Args:
        annual_rate: Risk-adjusted fractional annual return.
        years: Horizon selector value.
        initial: Lump sum invested at the start.
        monthly: Monthly contribution.

    Returns:
        Series indexed by year.
    """
    y = parse_horizon(years)
    p0 = non_negative(initial)
    c = non_negative(monthly)
    yrs = np.arange(y + 1)
    n = MONTHS_PER_YEAR * yrs
    r_m = annual_rate / MONTHS_PER_YEAR

    lump = np.zeros(len(yrs))
    contrib = np.zeros(len(yrs))
    with np.errstate(over="ignore", invalid="ignore"):
        if p0:
            lump = p0 * np.power(1 + annual_rate, yrs, dtype=float)
        if c and r_m == 0:
            contrib = c * n.astype(float)
        elif c:
            contrib = c * (np.power(1 + r_m, n, dtype=float) - 1) / r_m * (1 + r_m)

    return pd.Series(lump + contrib, index=pd.Index(yrs, name="year"), name="value")
