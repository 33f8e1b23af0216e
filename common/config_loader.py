from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict
import yaml

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"

def load_yaml(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}

@dataclass(frozen=True)
class LoadedConfig:
    risk: Dict[str, Any]
    returns: Dict[str, Any]

def load_all(
    risk_path: str | Path = CONFIG_DIR / "risk_templates.yaml",
    returns_path: str | Path = CONFIG_DIR / "scenario_returns.yaml",
) -> LoadedConfig:
    return LoadedConfig(
        risk=load_yaml(risk_path),
        returns=load_yaml(returns_path),
    )
