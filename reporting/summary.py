from __future__ import annotations
from typing import Dict, Any
import pandas as pd
from engine.projection_engine import ProjectionResult
from portfolio.allocation import AllocationSet

def allocation_summary(allocation: AllocationSet) -> Dict[str, Any]:
    return {
        "total": allocation.total,
        "fully_allocated": allocation.is_fully_allocated(),
        "entries": [{"id": e.id, "label": e.label, "weight": e.weight} for e in allocation.entries],
    }

def projection_table(results: Dict[str, ProjectionResult]) -> pd.DataFrame:
    df = pd.DataFrame(
        [r.__dict__ for r in results.values()],
        index=pd.Index(list(results.keys()), name="scenario"),
        columns=["annual_return_percent", "cumulative_return_percent", "projected_value"],
    )
    return df
