from __future__ import annotations
from dataclasses import dataclass
from typing import Dict

@dataclass(frozen=True)
class TemplateItem:
    asset_id: str
    percentage: float

@dataclass(frozen=True)
class Scenario:
    name: str
    rates: Dict[str, float]  # asset id -> fractional annual return

    def rate_for(self, asset_id: str, default_rate: float) -> float:
        return float(self.rates.get(asset_id, default_rate))
