from __future__ import annotations
from typing import Dict, List
from engine.projection_engine import ProjectionResult

def explain_projections(results: Dict[str, ProjectionResult], years: int) -> List[str]:
    return [
        f"{name}: {r.annual_return_percent:.2f}%/yr  |  {r.cumulative_return_percent:.2f}% over {years}y"
        f"  |  ${r.projected_value:,.0f}"
        for name, r in results.items()
    ]
