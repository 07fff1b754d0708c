"""
Vitals of a combatant.

HP, mana and endurance are the only shared mutable cells of a combat
session. Every change goes through the clamped setters of `Vitals`, which
keep each pool inside `[0, max]` where the maxima are read live from a
provider supplied by the host.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from skirmish.core.errors import require_finite

POOLS = ("hp", "mana", "endurance")


@dataclass(frozen=True)
class VitalMaxima:
    """Maximum value of each pool."""

    hp: int
    mana: int = 0
    endurance: int = 0


class Vitals:
    """
    Clamped HP, mana and endurance of one combatant.

    Attributes:
        maxima (Callable[[], VitalMaxima]):
            Live provider of the pool maxima.

    """

    def __init__(
        self,
        maxima: Callable[[], VitalMaxima],
        hp: int | None = None,
        mana: int | None = None,
        endurance: int | None = None,
    ) -> None:
        self.maxima = maxima
        self._values: dict[str, int] = {pool: 0 for pool in POOLS}
        current = maxima()
        self.set("hp", current.hp if hp is None else hp)
        self.set("mana", current.mana if mana is None else mana)
        self.set("endurance", current.endurance if endurance is None else endurance)

    @classmethod
    def fixed(cls, hp: int, mana: int = 0, endurance: int = 0) -> Vitals:
        """Creates full vitals whose maxima never change."""
        maxima = VitalMaxima(hp, mana, endurance)
        return cls(lambda: maxima)

    @classmethod
    def empty(cls) -> Vitals:
        """Creates vitals with every pool at zero and no capacity."""
        return cls.fixed(0)

    # === Accessors ===

    def get(self, pool: str) -> int:
        return self._values[pool]

    def maximum(self, pool: str) -> int:
        return max(0, int(getattr(self.maxima(), pool)))

    @property
    def hp(self) -> int:
        return self._values["hp"]

    @property
    def mana(self) -> int:
        return self._values["mana"]

    @property
    def endurance(self) -> int:
        return self._values["endurance"]

    @property
    def max_hp(self) -> int:
        return self.maximum("hp")

    @property
    def max_mana(self) -> int:
        return self.maximum("mana")

    @property
    def max_endurance(self) -> int:
        return self.maximum("endurance")

    def is_alive(self) -> bool:
        return self._values["hp"] > 0

    # === Mutators ===

    def set(self, pool: str, value: float) -> int:
        """
        Sets a pool, clamping the value into `[0, max]`.

        Args:
            pool (str):
                One of "hp", "mana" or "endurance".
            value (float):
                The requested value. Must be finite.

        Returns:
            int:
                The value actually stored.

        """
        if pool not in self._values:
            raise KeyError(f"Unknown vitals pool: {pool}")
        require_finite(value, pool)
        self._values[pool] = int(max(0, min(int(value), self.maximum(pool))))
        return self._values[pool]

    def update(self, pool: str, fn: Callable[[int], float]) -> int:
        """
        Applies `fn(current)` to a pool, reading the current value first.

        Returns:
            int:
                The value actually stored.

        """
        return self.set(pool, fn(self._values[pool]))

    def adjust(self, pool: str, delta: float, floor: int = 0) -> int:
        """
        Adds `delta` to a pool without going below `floor` or above max.

        Args:
            pool (str):
                The pool to change.
            delta (float):
                Amount to add (negative to subtract).
            floor (int):
                Lowest value the subtraction may reach. A pool that is already
                below the floor is never raised by a negative delta.

        Returns:
            int:
                The actual change (may be smaller than requested).

        """
        require_finite(delta, "delta")
        before = self._values[pool]
        if delta < 0:
            target = max(min(floor, before), before + delta)
        else:
            target = before + delta
        return self.set(pool, target) - before

    def set_hp(self, value: float) -> int:
        return self.set("hp", value)

    def update_hp(self, fn: Callable[[int], float]) -> int:
        return self.update("hp", fn)

    def adjust_hp(self, delta: float, floor: int = 0) -> int:
        return self.adjust("hp", delta, floor)

    def restore_full(self) -> None:
        """Fills every pool to its maximum."""
        for pool in POOLS:
            self.set(pool, self.maximum(pool))

    def zero(self) -> None:
        """Empties every pool."""
        for pool in POOLS:
            self._values[pool] = 0

    def __repr__(self) -> str:
        return (
            f"Vitals(hp={self.hp}/{self.max_hp}, mana={self.mana}/{self.max_mana}, "
            f"endurance={self.endurance}/{self.max_endurance})"
        )
