# mirath/errors.py

"""
Taksonomi error untuk inti perhitungan mawarits.

- InputValidationError   : input tidak sah (dikembalikan sebagai hasil gagal)
- DivisionByZero         : pembagian dengan nol pada pecahan eksak
- InternalInvariantViolation : bug internal (jumlah bagian != 1, sisa negatif, dsb.)
"""

from typing import Optional


class MirathError(Exception):
    """Akar semua error paket mirath."""


# --------------------------
# Error validasi input
# --------------------------
class InputValidationError(MirathError, ValueError):
    code = "InputValidationError"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class NonPositiveEstate(InputValidationError):
    code = "NonPositiveEstate"


class NegativeDeduction(InputValidationError):
    code = "NegativeDeduction"


class ExcessiveDeductions(InputValidationError):
    code = "ExcessiveDeductions"


class EstateTooLarge(InputValidationError):
    code = "EstateTooLarge"


class NoHeirsSpecified(InputValidationError):
    code = "NoHeirsSpecified"


class UnknownHeirType(InputValidationError):
    code = "UnknownHeirType"


class NegativeHeirCount(InputValidationError):
    code = "NegativeHeirCount"


class UnknownMadhab(InputValidationError):
    code = "UnknownMadhab"


# --------------------------
# Error aritmetika & invarian
# --------------------------
class DivisionByZero(MirathError, ZeroDivisionError):
    code = "DivisionByZero"


class InternalInvariantViolation(MirathError, RuntimeError):
    code = "InternalInvariantViolation"
