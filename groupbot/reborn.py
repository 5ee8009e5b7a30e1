"""Reincarnation simulator: a weighted random country and gender."""

from __future__ import annotations

import json
import random
from pathlib import Path

GENDERS = (("男孩子", 50707), ("女孩子", 48292), ("雌雄同体", 1001))
FAILURE = "投胎失败！\n您没能活到出生，祝您下次好运！"
_SUCCESS_LIMIT = 1 << 27


def load_rates(path) -> list[tuple[str, float]]:
    """Read a JSON list of {"name": ..., "weight": ...} entries."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError("rate file must hold a JSON list")
    rates = []
    for entry in data:
        try:
            rates.append((str(entry["name"]), float(entry["weight"])))
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"bad rate entry: {entry!r}") from exc
    return rates


class Reborn:
    """Picks where and as what someone is born again."""

    def __init__(self, areas, rng=None):
        names = []
        weights = []
        for name, weight in areas:
            if weight < 0:
                raise ValueError(f"negative weight for {name!r}")
            names.append(name)
            weights.append(int(weight * 1e9))
        if sum(weights) <= 0:
            raise ValueError("no area has a positive weight")
        self._names = names
        self._weights = weights
        self._rng = rng if rng is not None else random.Random()

    @classmethod
    def from_file(cls, path) -> "Reborn":
        return cls(load_rates(path))

    def country(self) -> str:
        return self._rng.choices(self._names, weights=self._weights)[0]

    def gender(self) -> str:
        names = [name for name, _ in GENDERS]
        weights = [weight for _, weight in GENDERS]
        return self._rng.choices(names, weights=weights)[0]

    def reborn(self) -> str:
        """Return the outcome message; about one try in sixteen fails."""
        if self._rng.getrandbits(31) > _SUCCESS_LIMIT:
            return f"投胎成功！\n您出生在 {self.country()}, 是 {self.gender()}。"
        return FAILURE