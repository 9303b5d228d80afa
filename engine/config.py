from __future__ import annotations
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict
import yaml

from types_sudoku import Difficulty

CONFIG_ENV = "SUDOKU_ENGINE_CONFIG"
DEFAULT_CONFIG = Path(__file__).resolve().parents[1] / "configs" / "engine.yaml"

class DotDict(dict):
    """Mapping with attribute access; missing keys read as None."""
    __getattr__ = dict.get
    __setattr__ = dict.__setitem__
    __delattr__ = dict.__delitem__

def _dotted(value: Any) -> Any:
    if isinstance(value, dict):
        return DotDict({k: _dotted(v) for k, v in value.items()})
    return value

def load_yaml(path: str | Path) -> DotDict:
    """Parse a YAML file whose top level is a mapping; nested sections are DotDicts too."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level, got {type(data).__name__}")
    return _dotted(data)

def merge_overrides(cfg: Dict[str, Any], **overrides) -> Dict[str, Any]:
    for k, v in overrides.items():
        if v is None:
            continue
        cfg[k] = v
    return cfg

@dataclass
class EngineConfig:
    history_limit: int | None = None        # None = unbounded undo
    default_difficulty: Difficulty = Difficulty.BASIC
    manual_full_candidates: bool = True     # manual games start with all nine notes per empty cell
    block_input_on_error: bool = True       # solving: ignore digits until the wrong one is undone

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "EngineConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"unknown engine config keys: {unknown}")
        cfg = cls(**data)
        cfg.default_difficulty = Difficulty(cfg.default_difficulty)
        if cfg.history_limit is not None and cfg.history_limit < 1:
            raise ValueError("history_limit must be positive or null")
        return cfg

def load_engine_config(path: str | Path | None = None, **overrides) -> EngineConfig:
    """Read the engine section of a YAML file; explicit path > $SUDOKU_ENGINE_CONFIG > configs/engine.yaml."""
    path = path or os.environ.get(CONFIG_ENV)
    if path is None:
        if not DEFAULT_CONFIG.exists():
            return EngineConfig.from_mapping(merge_overrides({}, **overrides))
        path = DEFAULT_CONFIG
    section = load_yaml(path).engine or {}
    if not isinstance(section, dict):
        raise ValueError(f"{path}: the engine section must be a mapping")
    y = dict(section)
    return EngineConfig.from_mapping(merge_overrides(y, **overrides))
