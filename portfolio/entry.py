from __future__ import annotations
from dataclasses import dataclass

@dataclass(frozen=True)
class AssetEntry:
    id: str
    label: str
    weight: float  # percentage, 0..100
    slot: int = 0  # presentation slot, unused by math
