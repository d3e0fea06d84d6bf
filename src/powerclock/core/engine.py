"""
Counter Engine

The arbitrary-precision doubling counter behind the PowerClock page.

On every tick the power is incremented and the value doubled. When a fixed
`bit_width` is configured and the doubled value no longer fits, both are
reset to one instead of wrapping. Each tick reports whether the new power is
a multiple of the modulus, which callers use to decide whether to re-render.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


class InvalidModulusError(ValueError):
    """Raised when a modulus is not a positive integer."""


@dataclass(frozen=True)
class CounterSnapshot:
    """Consistent copy of the counter state taken between ticks."""
    value: int
    power: int
    modulus: int

    @property
    def exponent(self) -> int:
        """Mathematical exponent of `value` (value == 2 ** exponent)."""
        return self.power - 1


class CounterEngine:
    """
    Doubling counter with an overflow-reset policy and modulus gating.

    `value` and `power` start at 1, so between ticks
    `value == 2 ** (power - 1)` always holds. The lock keeps the pair
    consistent for readers on other threads.
    """

    def __init__(self, modulus: int = 1, bit_width: Optional[int] = None):
        if bit_width is not None and bit_width < 1:
            raise ValueError(f"bit_width must be positive, got {bit_width!r}")
        self._lock = threading.Lock()
        self._value = 1
        self._power = 1
        self._modulus = self._validate_modulus(modulus)
        self.bit_width = bit_width

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    @property
    def power(self) -> int:
        with self._lock:
            return self._power

    @property
    def modulus(self) -> int:
        with self._lock:
            return self._modulus

    def _doubled(self) -> Optional[int]:
        """Return `value * 2`, or None when it does not fit in `bit_width`."""
        product = self._value * 2
        if self.bit_width is not None and product.bit_length() > self.bit_width:
            return None
        return product

    def tick(self) -> bool:
        """Advance the counter one step and return the gating signal."""
        with self._lock:
            product = self._doubled()
            if product is None:
                logger.debug("Counter overflowed %s bits at power %s, resetting",
                             self.bit_width, self._power)
                self._value = 1
                self._power = 1
            else:
                self._value = product
                self._power += 1
            return self._power % self._modulus == 0

    def set_modulus(self, new_modulus: int) -> None:
        """Replace the modulus. Value and power are left as they are."""
        modulus = self._validate_modulus(new_modulus)
        with self._lock:
            self._modulus = modulus

    def reset(self) -> None:
        with self._lock:
            self._value = 1
            self._power = 1

    def snapshot(self) -> CounterSnapshot:
        with self._lock:
            return CounterSnapshot(value=self._value, power=self._power, modulus=self._modulus)

    @staticmethod
    def _validate_modulus(modulus) -> int:
        # bool is an int subclass but never a meaningful modulus
        if isinstance(modulus, bool) or not isinstance(modulus, int):
            raise InvalidModulusError(f"Modulus must be an integer, got {modulus!r}")
        if modulus <= 0:
            raise InvalidModulusError(f"Modulus must be at least 1, got {modulus}")
        return modulus

    def __repr__(self) -> str:
        snap = self.snapshot()
        return f"CounterEngine(power={snap.power}, modulus={snap.modulus}, bit_width={self.bit_width})"
