from __future__ import annotations
from typing import Dict, Any, List
from engine.projection_engine import ProjectionResult

def explainability_report(results: Dict[str, ProjectionResult], warnings: List[str], summary: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "summary": summary,
        "warnings": warnings,
        "projections": {name: r.__dict__ for name, r in results.items()},
    }
