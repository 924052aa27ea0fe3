from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Union

Number = Union["ComplexNumber", complex, float, int]


@dataclass(frozen=True)
class ComplexNumber:
    """
    Immutable real/imaginary pair.

    Arithmetic is total. ``is_close`` and ``__str__`` are approximate and
    meant for display and tests, not for control flow.
    """
    real: float = 0.0
    imaginary: float = 0.0

    @classmethod
    def coerce(cls, value: Number) -> "ComplexNumber":
        if isinstance(value, ComplexNumber):
            return value
        c = complex(value)
        return cls(float(c.real), float(c.imag))

    from_complex = coerce

    @classmethod
    def from_dict(cls, data: dict) -> "ComplexNumber":
        return cls(float(data["real"]), float(data["imaginary"]))

    def to_dict(self) -> dict:
        # always a pair, even when imaginary == 0
        return {"real": self.real, "imaginary": self.imaginary}

    def add(self, other: Number) -> "ComplexNumber":
        o = ComplexNumber.coerce(other)
        return ComplexNumber(self.real + o.real, self.imaginary + o.imaginary)

    def subtract(self, other: Number) -> "ComplexNumber":
        o = ComplexNumber.coerce(other)
        return ComplexNumber(self.real - o.real, self.imaginary - o.imaginary)

    def multiply(self, other: Number) -> "ComplexNumber":
        o = ComplexNumber.coerce(other)
        return ComplexNumber(
            self.real * o.real - self.imaginary * o.imaginary,
            self.real * o.imaginary + self.imaginary * o.real,
        )

    def conjugate(self) -> "ComplexNumber":
        return ComplexNumber(self.real, -self.imaginary)

    def magnitude(self) -> float:
        return math.sqrt(self.real * self.real + self.imaginary * self.imaginary)

    def phase(self) -> float:
        return math.atan2(self.imaginary, self.real)

    def is_close(self, other: Number, tol: float = 1e-10) -> bool:
        o = ComplexNumber.coerce(other)
        return abs(self.real - o.real) <= tol and abs(self.imaginary - o.imaginary) <= tol

    __add__ = add
    __sub__ = subtract
    __mul__ = multiply

    def __radd__(self, other: Number) -> "ComplexNumber":
        return ComplexNumber.coerce(other).add(self)

    def __rsub__(self, other: Number) -> "ComplexNumber":
        return ComplexNumber.coerce(other).subtract(self)

    def __rmul__(self, other: Number) -> "ComplexNumber":
        return ComplexNumber.coerce(other).multiply(self)

    def __neg__(self) -> "ComplexNumber":
        return ComplexNumber(-self.real, -self.imaginary)

    def __complex__(self) -> complex:
        return complex(self.real, self.imaginary)

    def __abs__(self) -> float:
        return self.magnitude()

    def __str__(self) -> str:
        re, im = self.real, self.imaginary
        if abs(re) < 1e-10 and abs(im) < 1e-10:
            return "0"
        if abs(im) < 1e-10:
            return f"{re:.4f}"
        if abs(re) < 1e-10:
            return f"{im:.4f}i"
        sign = "+" if im >= 0 else "-"
        return f"{re:.4f} {sign} {abs(im):.4f}i"


ZERO = ComplexNumber(0.0, 0.0)
ONE = ComplexNumber(1.0, 0.0)
I = ComplexNumber(0.0, 1.0)
