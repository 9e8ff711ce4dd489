# mirath/validation.py

from decimal import Decimal
from typing import Dict, Mapping

from mirath.errors import (
    EstateTooLarge,
    ExcessiveDeductions,
    NegativeDeduction,
    NegativeHeirCount,
    NoHeirsSpecified,
    NonPositiveEstate,
    UnknownHeirType,
)
from schemas import EstateData, HeirType

DEDUCTIONS = ("funeral_costs", "debts", "bequest")

# batas atas harta; di atas ini pembulatan ke sen melampaui presisi Decimal bawaan (28 digit)
MAX_ESTATE = Decimal("1e18")


def validate_estate(estate: EstateData) -> Decimal:
    """Periksa harta lalu kembalikan harta bersih (tirkah setelah biaya, hutang, wasiat)."""
    if estate.total <= 0:
        raise NonPositiveEstate("Total harta harus lebih dari nol", field="estate.total")
    if estate.total >= MAX_ESTATE:
        raise EstateTooLarge(f"Total harta harus kurang dari {MAX_ESTATE:,f}", field="estate.total")
    for name in DEDUCTIONS:
        if getattr(estate, name) < 0:
            raise NegativeDeduction(f"Potongan {name} tidak boleh negatif", field=f"estate.{name}")
    deductions = sum((getattr(estate, name) for name in DEDUCTIONS), Decimal("0"))
    if deductions > estate.total:
        raise ExcessiveDeductions(
            f"Total potongan ({deductions}) melebihi total harta ({estate.total})",
            field="estate",
        )
    return estate.net_estate


def validate_heirs(raw: Mapping[str, int]) -> Dict[HeirType, int]:
    """
    Ubah kunci mentah menjadi HeirType (sekali, di batas input).
    Hasil berurutan sesuai HeirType dan hanya berisi jumlah > 0.
    """
    heirs: Dict[HeirType, int] = {}
    for key, count in raw.items():
        try:
            heir = HeirType(str(key).strip().lower())
        except ValueError:
            raise UnknownHeirType(f"Ahli waris tidak dikenal: {key!r}", field=f"heirs.{key}") from None
        if count < 0:
            raise NegativeHeirCount(
                f"Jumlah ahli waris {key!r} tidak boleh negatif ({count})", field=f"heirs.{key}"
            )
        heirs[heir] = heirs.get(heir, 0) + count

    if not any(c > 0 for c in heirs.values()):
        raise NoHeirsSpecified("Minimal harus ada satu ahli waris", field="heirs")
    return {h: heirs[h] for h in HeirType if heirs.get(h, 0) > 0}
