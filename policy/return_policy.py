from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Any, List
from policy.types import Scenario

DEFAULT_RATE = 0.03
CANONICAL_SCENARIOS = ["worst", "most_likely", "best"]

@dataclass(frozen=True)
class ReturnPolicy:
    raw: Dict[str, Any]

    @property
    def default_rate(self) -> float:
        v = self.raw.get("default_rate")
        return DEFAULT_RATE if v is None else float(v)

    @property
    def scenario_names(self) -> List[str]:
        return list(self.raw.get("scenarios") or CANONICAL_SCENARIOS)

    @property
    def asset_names(self) -> Dict[str, str]:
        assets = self.raw.get("assets") or {}
        return {a: str(info["name"]) for a, info in assets.items() if info and info.get("name")}

    def scenario(self, name: str) -> Scenario:
        """Per-asset rates for one scenario. Unknown names give an empty table."""
        rates: Dict[str, float] = {}
        for a, info in (self.raw.get("assets") or {}).items():
            returns = (info or {}).get("returns") or {}
            if returns.get(name) is not None:
                rates[a] = float(returns[name])
        return Scenario(name=name, rates=rates)

    def scenarios(self) -> List[Scenario]:
        return [self.scenario(n) for n in self.scenario_names]

def validate_return_table(pol: ReturnPolicy) -> List[str]:
    issues: List[str] = []
    for a, info in (pol.raw.get("assets") or {}).items():
        returns = (info or {}).get("returns") or {}
        for name in pol.scenario_names:
            if returns.get(name) is None:
                issues.append(f"Missing {name} return for {a}; default {pol.default_rate:.2%} applies")
            elif float(returns[name]) <= -1.0:
                issues.append(f"Return at or below -100%: {a}/{name}")
    return issues
