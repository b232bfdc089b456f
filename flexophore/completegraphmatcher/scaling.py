"""
Piecewise linear scaling of similarity values.
"""

from __future__ import annotations
from typing import Iterable, List, Tuple

ScaleClass = Tuple[float, float, float, float]


class ScaleClasses:
    """
    Monotone breakpoint table. Each class maps ``[x_lo, x_hi]`` linearly onto
    ``[y_lo, y_hi]``. Values below the first class map to its ``y_lo``,
    values above the last class to its ``y_hi``. A value in a gap between
    two classes takes the upper y value of the class below it.
    """

    def __init__(self, classes: Iterable[ScaleClass] = ()):
        self._classes: List[ScaleClass] = []
        for c in classes:
            self.add(*c)

    def add(self, x_lo: float, x_hi: float, y_lo: float, y_hi: float) -> 'ScaleClasses':
        if x_hi <= x_lo:
            raise ValueError(f"Empty x range [{x_lo}, {x_hi}]")
        self._classes.append((float(x_lo), float(x_hi), float(y_lo), float(y_hi)))
        self._classes.sort(key=lambda c: c[0])
        return self

    @property
    def classes(self) -> List[ScaleClass]:
        return list(self._classes)

    def scale(self, value: float) -> float:
        if not self._classes:
            return value

        first = self._classes[0]
        if value <= first[0]:
            return first[2]

        below = first
        for x_lo, x_hi, y_lo, y_hi in self._classes:
            if x_lo <= value <= x_hi:
                return y_lo + (value - x_lo) / (x_hi - x_lo) * (y_hi - y_lo)
            if x_hi < value:
                below = (x_lo, x_hi, y_lo, y_hi)
        return below[3]

    def __repr__(self) -> str:
        return f"ScaleClasses({self._classes})"
