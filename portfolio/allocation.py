"""Allocation set with proportional rebalancing.

Every operation returns a new ``AllocationSet`` snapshot. Rejected edits
return the current snapshot unchanged; nothing here raises on bad input.
"""
from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple

from portfolio.entry import AssetEntry

logger = logging.getLogger(__name__)

FULL_ALLOCATION = 100.0
TOTAL_TOLERANCE = 1e-6


def coerce_weight(value: Any) -> Optional[float]:
    """Return ``value`` as a float in [0, 100], or None if it is not one."""
    if isinstance(value, bool):
        return None
    try:
        w = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(w) or w < 0 or w > FULL_ALLOCATION:
        return None
    return w


def default_label(asset_id: str) -> str:
    return asset_id[:1].upper() + asset_id[1:]


@dataclass(frozen=True)
class AllocationSet:
    entries: Tuple[AssetEntry, ...] = ()

    @property
    def total(self) -> float:
        return sum(e.weight for e in self.entries)

    def is_fully_allocated(self, tol: float = TOTAL_TOLERANCE) -> bool:
        return abs(self.total - FULL_ALLOCATION) <= tol

    def ids(self) -> List[str]:
        return [e.id for e in self.entries]

    def get(self, entry_id: str) -> Optional[AssetEntry]:
        for e in self.entries:
            if e.id == entry_id:
                return e
        return None

    def weights(self) -> Dict[str, float]:
        return {e.id: e.weight for e in self.entries}

    def set_weight(self, entry_id: str, new_weight: Any) -> AllocationSet:
        """Set one entry's weight and take any excess over 100 from the others.

        The excess is spread over the other entries in proportion to their
        pre-edit weights, each floored at 0. There is no second pass, so an
        edit may land under 100 when other entries are already near zero.
        If every other entry is at 0 the edited weight is clamped to 100.

        Args:
            entry_id: Id of the entry to edit.
            new_weight: Requested percentage. Anything that is not a finite
                number in [0, 100] is rejected.

        Returns:
            The new snapshot, or ``self`` if the edit was rejected.
        """
        weight = coerce_weight(new_weight)
        if weight is None:
            logger.debug(f"Rejected weight {new_weight!r} for {entry_id}")
            return self
        if self.get(entry_id) is None:
            logger.debug(f"Rejected weight edit for unknown entry {entry_id}")
            return self

        others_total = sum(e.weight for e in self.entries if e.id != entry_id)
        current_total = others_total + weight

        if current_total <= FULL_ALLOCATION:
            return AllocationSet(tuple(
                replace(e, weight=weight) if e.id == entry_id else e for e in self.entries
            ))

        excess = current_total - FULL_ALLOCATION
        if others_total > 0:
            updated = []
            for e in self.entries:
                if e.id == entry_id:
                    updated.append(replace(e, weight=weight))
                else:
                    reduction = (e.weight / others_total) * excess
                    updated.append(replace(e, weight=max(0.0, e.weight - reduction)))
            return AllocationSet(tuple(updated))

        return AllocationSet(tuple(
            replace(e, weight=min(FULL_ALLOCATION, weight)) if e.id == entry_id else e
            for e in self.entries
        ))

    def add_entry(
        self,
        label: str,
        initial_weight: Any = 0.0,
        entry_id: Optional[str] = None,
    ) -> AllocationSet:
        """Append a new entry without rebalancing the existing ones."""
        weight = coerce_weight(initial_weight)
        if weight is None:
            weight = 0.0
        existing = set(self.ids())
        if entry_id is None or entry_id in existing:
            entry_id = _new_id(existing)
        slot = max((e.slot for e in self.entries), default=-1) + 1
        entry = AssetEntry(id=entry_id, label=label, weight=weight, slot=slot)
        return AllocationSet(self.entries + (entry,))

    def remove_entry(self, entry_id: str) -> AllocationSet:
        """Remove an entry and hand its weight to the rest proportionally."""
        removed = self.get(entry_id)
        if removed is None:
            logger.debug(f"Ignored removal of unknown entry {entry_id}")
            return self

        remaining = [e for e in self.entries if e.id != entry_id]
        remaining_total = sum(e.weight for e in remaining)
        if remaining_total + removed.weight == 0 or remaining_total <= 0:
            return AllocationSet(tuple(remaining))

        return AllocationSet(tuple(
            replace(
                e,
                weight=min(
                    FULL_ALLOCATION,
                    e.weight + (e.weight / remaining_total) * removed.weight,
                ),
            )
            for e in remaining
        ))

    def rename_entry(self, entry_id: str, new_label: str) -> AllocationSet:
        if self.get(entry_id) is None:
            return self
        return AllocationSet(tuple(
            replace(e, label=new_label) if e.id == entry_id else e for e in self.entries
        ))

    def apply_template(
        self,
        template_entries: Iterable[Tuple[str, float]],
        labels: Optional[Dict[str, str]] = None,
    ) -> AllocationSet:
        return from_template(template_entries, labels)


def from_template(
    template_entries: Iterable[Tuple[str, float]],
    labels: Optional[Dict[str, str]] = None,
) -> AllocationSet:
    """Build a snapshot from ``(asset_id, percentage)`` pairs.

    The template is trusted to sum to 100 and is not rebalanced. Labels come
    from ``labels`` when present, otherwise from the capitalised id.
    """
    labels = labels or {}
    entries = []
    seen = set()
    for slot, (asset_id, weight) in enumerate(template_entries):
        if asset_id in seen:
            continue
        seen.add(asset_id)
        entries.append(AssetEntry(
            id=asset_id,
            label=labels.get(asset_id) or default_label(asset_id),
            weight=float(weight),
            slot=slot,
        ))
    return AllocationSet(tuple(entries))


def _new_id(existing: set) -> str:
    while True:
        candidate = f"asset-{uuid.uuid4().hex[:8]}"
        if candidate not in existing:
            return candidate
