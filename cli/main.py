"""Portfolio calculator CLI.

Provides commands for:
- templates: Show risk allocation templates
- scenarios: Show scenario return assumptions
- project: Edit an allocation and project its growth
"""
from __future__ import annotations

import argparse
import json
import logging
from typing import List, Optional, Tuple

import pandas as pd

from common.config_loader import CONFIG_DIR, load_all
from engine.explanation_engine import explain_projections
from engine.projection_engine import non_negative, parse_horizon, project, value_schedule, weighted_return
from policy.return_policy import ReturnPolicy, validate_return_table
from policy.risk_policy import RiskPolicy, validate_templates
from portfolio.allocation import AllocationSet, coerce_weight, from_template
from reporting.explainability import explainability_report
from reporting.summary import allocation_summary, projection_table


def build_allocation(risk: RiskPolicy, returns: ReturnPolicy, label: str) -> AllocationSet:
    """Build the starting allocation from a risk template."""
    items = risk.template(label) or []
    return from_template([(i.asset_id, i.percentage) for i in items], returns.asset_names)


def parse_pair(item: str) -> Optional[Tuple[str, str]]:
    """Split ``key=value``. Returns None when there is no ``=``."""
    if "=" not in item:
        return None
    key, value = item.split("=", 1)
    return key.strip(), value.strip()


def apply_edits(allocation: AllocationSet, args) -> Tuple[AllocationSet, List[str]]:
    """Apply CLI edits in order: remove, add, set, rename.

    Returns:
        Tuple of (new allocation, list of error messages).
    """
    errors: List[str] = []

    for entry_id in args.remove or []:
        if allocation.get(entry_id) is None:
            errors.append(f"Unknown asset id: {entry_id}")
            continue
        allocation = allocation.remove_entry(entry_id)

    for item in args.add or []:
        pair = parse_pair(item)
        label, weight = pair if pair else (item, "0")
        if coerce_weight(weight) is None:
            errors.append(f"Weight must be a number between 0 and 100: {item}")
            continue
        allocation = allocation.add_entry(label, weight)

    for item in args.set or []:
        pair = parse_pair(item)
        if pair is None:
            errors.append(f"Invalid --set format: {item} (expected id=weight)")
            continue
        entry_id, weight = pair
        if allocation.get(entry_id) is None:
            errors.append(f"Unknown asset id: {entry_id}")
            continue
        updated = allocation.set_weight(entry_id, weight)
        if updated is allocation:
            errors.append(f"Weight must be a number between 0 and 100: {item}")
            continue
        allocation = updated

    for item in args.rename or []:
        pair = parse_pair(item)
        if pair is None:
            errors.append(f"Invalid --rename format: {item} (expected id=label)")
            continue
        allocation = allocation.rename_entry(*pair)

    return allocation, errors


def cmd_templates(args) -> int:
    """Handle templates command: list risk templates."""
    cfg = load_all(args.risk_config, args.returns_config)
    risk = RiskPolicy(cfg.risk)

    print("Risk Templates")
    print("=" * 40)
    for label in risk.labels:
        marker = " (default)" if label == risk.default_risk else ""
        print(f"\n{label}{marker}  multiplier {risk.multiplier(label):.2f}")
        for item in risk.template(label) or []:
            print(f"  {item.asset_id:14} {item.percentage:6.2f}%")

    issues = validate_templates(risk)
    if issues:
        print("\nWarnings:")
        for w in issues:
            print(f"  - {w}")
    return 0


def cmd_scenarios(args) -> int:
    """Handle scenarios command: list scenario return assumptions."""
    cfg = load_all(args.risk_config, args.returns_config)
    returns = ReturnPolicy(cfg.returns)
    names = returns.scenario_names

    print("Scenario Returns")
    print("=" * 60)
    print(f"  {'asset':14}" + "".join(f"{n:>14}" for n in names))
    scenarios = returns.scenarios()
    asset_ids = sorted({a for s in scenarios for a in s.rates})
    for a in asset_ids:
        row = "".join(f"{s.rate_for(a, returns.default_rate):>14.2%}" for s in scenarios)
        print(f"  {a:14}{row}")
    print(f"\n  Unlisted assets: {returns.default_rate:.2%}")
    return 0


def cmd_project(args) -> int:
    """Handle project command: edit an allocation and project its growth."""
    cfg = load_all(args.risk_config, args.returns_config)
    risk = RiskPolicy(cfg.risk)
    returns = ReturnPolicy(cfg.returns)

    label = args.risk or risk.default_risk
    if risk.template(label) is None:
        print(f"Error: Unknown risk tolerance: {label}")
        print(f"Available: {', '.join(risk.labels)}")
        return 1

    allocation, errors = apply_edits(build_allocation(risk, returns, label), args)
    if errors:
        for e in errors:
            print(f"Error: {e}")
        return 1

    years = parse_horizon(args.years)
    multiplier = risk.multiplier(label)
    scenarios = returns.scenarios()
    results = project(
        allocation,
        scenarios,
        risk_multiplier=multiplier,
        years=years,
        initial=args.initial,
        monthly=args.monthly,
        default_rate=returns.default_rate,
    )

    warnings = validate_templates(risk) + validate_return_table(returns)
    if not allocation.is_fully_allocated():
        warnings.append(f"Total allocation is {allocation.total:.2f}%; adjust weights to 100% to see projections")

    if args.json:
        report = explainability_report(results, warnings, allocation_summary(allocation))
        print(json.dumps(report, indent=2))
        return 0

    print(f"Portfolio Allocation ({label}, multiplier {multiplier:.2f})")
    print("=" * 50)
    for e in allocation.entries:
        print(f"  {e.id:16} {e.label:16} {e.weight:6.2f}%")
    print("-" * 50)
    print(f"  {'Total':33} {allocation.total:6.2f}%")

    if warnings:
        print("\nWarnings:")
        for w in warnings:
            print(f"  - {w}")

    print(
        f"\nProjections: {years} years, ${non_negative(args.initial):,.0f} initial, "
        f"${non_negative(args.monthly):,.0f}/month"
    )
    if args.explain:
        for line in explain_projections(results, years):
            print("  " + line)
    else:
        print(projection_table(results).round(2).to_string())

    if args.schedule and allocation.is_fully_allocated():
        print("\nYear-by-year value:")
        schedule = pd.DataFrame({
            s.name: value_schedule(
                weighted_return(allocation, s, returns.default_rate) * multiplier,
                years,
                args.initial,
                args.monthly,
            )
            for s in scenarios
        })
        print(schedule.round(0).to_string())

    return 0


def main():
    """Main entry point."""
    p = argparse.ArgumentParser(
        prog="cli.main",
        description="Portfolio calculator CLI: allocation rebalancing and scenario growth projection",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    # Common arguments for all commands
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--risk-config",
        default=str(CONFIG_DIR / "risk_templates.yaml"),
        help="Risk templates file",
    )
    common.add_argument(
        "--returns-config",
        default=str(CONFIG_DIR / "scenario_returns.yaml"),
        help="Scenario returns file",
    )

    tp = sub.add_parser("templates", parents=[common], help="Show risk allocation templates")
    tp.set_defaults(func=cmd_templates)

    sp = sub.add_parser("scenarios", parents=[common], help="Show scenario return assumptions")
    sp.set_defaults(func=cmd_scenarios)

    pp = sub.add_parser("project", parents=[common], help="Project growth of an allocation")
    pp.add_argument("--risk", default=None, help="Risk tolerance template (default from config)")
    pp.add_argument("--years", default="10", help="Horizon in whole years")
    pp.add_argument("--initial", type=float, default=10000.0, help="Initial investment")
    pp.add_argument("--monthly", type=float, default=0.0, help="Monthly contribution")
    pp.add_argument("--remove", nargs="*", help="Asset ids to remove")
    pp.add_argument("--add", nargs="*", help="New assets: label or label=weight")
    pp.add_argument("--set", nargs="*", help="Weight edits: id=weight (e.g., stocks=70)")
    pp.add_argument("--rename", nargs="*", help="Label edits: id=label")
    pp.add_argument("--explain", action="store_true", help="Print one line per scenario")
    pp.add_argument("--schedule", action="store_true", help="Print year-by-year values")
    pp.add_argument("--json", action="store_true", help="Print a JSON report")
    pp.set_defaults(func=cmd_project)

    args = p.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    raise SystemExit(args.func(args))


if __name__ == "__main__":
    main()
