# mirath/math/fraction.py

from __future__ import annotations

import fractions
from decimal import Decimal
from numbers import Integral
from typing import Any, Dict, Iterable, Union

from mirath.errors import DivisionByZero

# Nama Arab untuk furudh yang dikenal kitab
ARABIC_NAMES = {
    (1, 2): "النصف",
    (1, 4): "الربع",
    (1, 8): "الثمن",
    (2, 3): "الثلثان",
    (1, 3): "الثلث",
    (1, 6): "السدس",
}


class Fraction:
    """
    Pecahan eksak (bilangan rasional) yang immutable, dibungkus di atas
    fractions.Fraction bawaan Python.

    Selalu dalam bentuk paling sederhana, penyebut selalu positif, 0 = 0/1.
    Bedanya dengan fractions.Fraction: hanya menerima bilangan bulat (float
    ditolak), pembagian dengan nol melempar DivisionByZero, dan teksnya
    mengikuti format laporan ("n/d" atau "n").
    """

    __slots__ = ("_value",)

    def __init__(self, numerator: int, denominator: int = 1):
        if not isinstance(numerator, Integral) or not isinstance(denominator, Integral):
            raise TypeError(
                f"Pembilang dan penyebut harus bilangan bulat, bukan {numerator!r}/{denominator!r}"
            )
        if denominator == 0:
            raise DivisionByZero(f"Penyebut tidak boleh nol ({numerator}/0)")
        object.__setattr__(self, "_value", fractions.Fraction(int(numerator), int(denominator)))

    @classmethod
    def _wrap(cls, value: fractions.Fraction) -> "Fraction":
        obj = object.__new__(cls)
        object.__setattr__(obj, "_value", value)
        return obj

    def __setattr__(self, name, value):
        raise AttributeError("Fraction bersifat immutable")

    @property
    def numerator(self) -> int:
        return self._value.numerator

    @property
    def denominator(self) -> int:
        return self._value.denominator

    # --------------------------
    # Konstruksi
    # --------------------------
    @classmethod
    def from_string(cls, text: str) -> "Fraction":
        """Parse teks "n/d" atau "n"."""
        text = text.strip()
        if "/" in text:
            num, den = text.split("/", 1)
            return cls(int(num), int(den))
        return cls(int(text))

    @classmethod
    def from_data(cls, data: Dict[str, Any]) -> "Fraction":
        return cls(int(data["numerator"]), int(data["denominator"]))

    def to_data(self) -> Dict[str, int]:
        return {"numerator": self.numerator, "denominator": self.denominator}

    @staticmethod
    def _coerce(other: Union["Fraction", int]) -> fractions.Fraction:
        if isinstance(other, Fraction):
            return other._value
        if isinstance(other, Integral):
            return fractions.Fraction(int(other))
        raise TypeError(f"Tidak bisa dioperasikan dengan Fraction: {other!r}")

    # --------------------------
    # Aritmetika
    # --------------------------
    def add(self, other: Union["Fraction", int]) -> "Fraction":
        return self._wrap(self._value + self._coerce(other))

    def subtract(self, other: Union["Fraction", int]) -> "Fraction":
        return self._wrap(self._value - self._coerce(other))

    def multiply(self, other: Union["Fraction", int]) -> "Fraction":
        return self._wrap(self._value * self._coerce(other))

    def divide(self, other: Union["Fraction", int]) -> "Fraction":
        o = self._coerce(other)
        if o == 0:
            raise DivisionByZero(f"Tidak bisa membagi {self} dengan nol")
        return self._wrap(self._value / o)

    def __add__(self, other):
        if not isinstance(other, (Fraction, Integral)):
            return NotImplemented
        return self.add(other)

    __radd__ = __add__

    def __sub__(self, other):
        if not isinstance(other, (Fraction, Integral)):
            return NotImplemented
        return self.subtract(other)

    def __rsub__(self, other):
        if not isinstance(other, Integral):
            return NotImplemented
        return Fraction(int(other)).subtract(self)

    def __mul__(self, other):
        if not isinstance(other, (Fraction, Integral)):
            return NotImplemented
        return self.multiply(other)

    __rmul__ = __mul__

    def __truediv__(self, other):
        if not isinstance(other, (Fraction, Integral)):
            return NotImplemented
        return self.divide(other)

    def __rtruediv__(self, other):
        if not isinstance(other, Integral):
            return NotImplemented
        return Fraction(int(other)).divide(self)

    def __neg__(self) -> "Fraction":
        return self._wrap(-self._value)

    def __abs__(self) -> "Fraction":
        return self._wrap(abs(self._value))

    # --------------------------
    # Perbandingan
    # --------------------------
    def equals(self, other: Union["Fraction", int]) -> bool:
        return self._value == self._coerce(other)

    def __eq__(self, other):
        if not isinstance(other, (Fraction, Integral)):
            return NotImplemented
        return self.equals(other)

    def __hash__(self):
        # sama dengan hash bilangan bulat bila penyebutnya 1
        return hash(self._value)

    def __lt__(self, other):
        if not isinstance(other, (Fraction, Integral)):
            return NotImplemented
        return self._value < self._coerce(other)

    def __le__(self, other):
        if not isinstance(other, (Fraction, Integral)):
            return NotImplemented
        return self._value <= self._coerce(other)

    def __gt__(self, other):
        if not isinstance(other, (Fraction, Integral)):
            return NotImplemented
        return self._value > self._coerce(other)

    def __ge__(self, other):
        if not isinstance(other, (Fraction, Integral)):
            return NotImplemented
        return self._value >= self._coerce(other)

    def __bool__(self) -> bool:
        return bool(self._value)

    @property
    def is_zero(self) -> bool:
        return self._value == 0

    # --------------------------
    # Proyeksi (lossy) untuk tampilan & uang
    # --------------------------
    def to_decimal(self) -> Decimal:
        return Decimal(self.numerator) / Decimal(self.denominator)

    def to_float(self) -> float:
        return float(self._value)

    def approx_equals(self, other: Union["Fraction", int, float], tolerance: float = 1e-3) -> bool:
        """Perbandingan toleran, hanya untuk nilai yang berasal dari desimal."""
        if isinstance(other, (Fraction, Integral)):
            other_value = float(self._coerce(other))
        else:
            other_value = float(other)
        return abs(self.to_float() - other_value) <= tolerance

    def arabic_name(self) -> str:
        return ARABIC_NAMES.get((self.numerator, self.denominator), str(self))

    def __str__(self) -> str:
        return str(self._value)

    def __repr__(self) -> str:
        return f"Fraction({self.numerator}, {self.denominator})"

    def __reduce__(self):
        return (Fraction, (self.numerator, self.denominator))


ZERO = Fraction(0)
ONE = Fraction(1)


def sum_fractions(values: Iterable[Fraction]) -> Fraction:
    return Fraction._wrap(sum((Fraction._coerce(v) for v in values), fractions.Fraction(0)))
