from __future__ import annotations
import os, json, random
from dataclasses import dataclass, asdict, field, fields
from typing import List, Optional, Tuple
import numpy as np
import torch

DEFAULT_LAYOUT = [
    "SNNMN",
    "NNNNN",
    "NNNNN",
    "NMNNN",
    "NNNNG",
]

def seed_everything(seed: Optional[int] = 42) -> None:
    if seed is None:
        return
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)

def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """One generator per run; ``None`` draws fresh OS entropy."""
    return np.random.default_rng(seed)

def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)

def save_json(path: str, obj: dict) -> None:
    ensure_dir(os.path.dirname(path) or ".")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, ensure_ascii=False)

def load_json(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)

@dataclass
class QLearnConfig:
    run_name: str = "slipgrid_q"
    seed: Optional[int] = None
    layout: List[str] = field(default_factory=lambda: list(DEFAULT_LAYOUT))
    start: Optional[Tuple[int, int]] = None
    gamma: float = 0.9
    lr: float = 1.0
    eps_start: float = 1.0
    eps_min: float = 0.01
    eps_decay: float = 0.995
    episodes: int = 10000
    max_steps: int = 100
    slip_prob: float = 0.5
    log_every: int = 1000
    runs_dir: Optional[str] = None
    reports_dir: str = "reports"
    tensorboard: bool = True

    def __post_init__(self):
        if self.start is not None:
            self.start = tuple(int(v) for v in self.start)
        self.layout = [str(row) for row in self.layout]
        for name in ("gamma", "lr", "eps_start", "eps_min", "eps_decay", "slip_prob"):
            value = float(getattr(self, name))
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value}")
        if self.lr == 0.0:
            raise ValueError("lr must be > 0")
        for name in ("episodes", "max_steps", "log_every"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            setattr(self, name, int(value))
        for name in ("episodes", "max_steps"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.log_every < 0:
            raise ValueError(f"log_every must be >= 0, got {self.log_every}")

    @staticmethod
    def from_json(path: str) -> "QLearnConfig":
        data = load_json(path)
        known = {f.name for f in fields(QLearnConfig)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"unknown config keys in {path}: {', '.join(unknown)}")
        return QLearnConfig(**data)

    def to_dict(self) -> dict:
        d = asdict(self)
        if d["start"] is not None:
            d["start"] = list(d["start"])
        return d
