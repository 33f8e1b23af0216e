from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Any, List, Optional
from policy.types import TemplateItem

DEFAULT_MULTIPLIER = 1.0

@dataclass(frozen=True)
class RiskPolicy:
    raw: Dict[str, Any]

    @property
    def default_risk(self) -> str:
        return str(self.raw.get("default_risk", "moderate"))

    @property
    def labels(self) -> List[str]:
        return list((self.raw.get("templates") or {}).keys())

    def multiplier(self, risk: str) -> float:
        conf = (self.raw.get("templates") or {}).get(risk)
        if not conf or conf.get("multiplier") is None:
            return DEFAULT_MULTIPLIER
        return float(conf["multiplier"])

    def template(self, risk: str) -> Optional[List[TemplateItem]]:
        conf = (self.raw.get("templates") or {}).get(risk)
        if not conf:
            return None
        return [
            TemplateItem(asset_id=str(item["id"]), percentage=float(item["percentage"]))
            for item in conf.get("allocation") or []
        ]

def validate_templates(pol: RiskPolicy, tol: float = 1e-6) -> List[str]:
    issues: List[str] = []
    for label in pol.labels:
        items = pol.template(label) or []
        if not items:
            issues.append(f"Risk template has no allocation: {label}")
            continue
        s = sum(i.percentage for i in items)
        if abs(s - 100.0) > tol:
            issues.append(f"Risk template does not sum to 100: {label} {s:g}%")
        for i in items:
            if i.percentage < 0 or i.percentage > 100:
                issues.append(f"Template weight out of range: {label}/{i.asset_id} {i.percentage:g}%")
        ids = [i.asset_id for i in items]
        if len(set(ids)) != len(ids):
            issues.append(f"Risk template repeats an asset id: {label}")
        if pol.multiplier(label) < 0:
            issues.append(f"Negative risk multiplier: {label}")
    return issues
