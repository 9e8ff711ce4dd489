# mirath/math/amounts.py

from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Mapping

from mirath.errors import InternalInvariantViolation
from mirath.math.fraction import Fraction
from schemas import HeirType

CENT = Decimal("0.01")


def to_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def amount_for(fraction: Fraction, net_estate: Decimal) -> Decimal:
    """round(pecahan × harta bersih, 2), pembulatan setengah ke atas."""
    return to_money(net_estate * fraction.numerator / fraction.denominator)


def _largest(amounts: Mapping[HeirType, Decimal]) -> HeirType:
    # nominal terbesar; bila sama, yang lebih dulu dalam urutan HeirType
    target = None
    for heir in HeirType:
        if heir in amounts and amounts[heir] > 0 and (target is None or amounts[heir] > amounts[target]):
            target = heir
    if target is None:
        raise InternalInvariantViolation("Tidak ada nominal yang bisa dikurangi")
    return target


def distribute_amounts(fractions: Mapping[HeirType, Fraction],
                       net_estate: Decimal) -> Dict[HeirType, Decimal]:
    """
    Nominal tiap golongan, jumlahnya tepat sama dengan harta bersih.

    Selisih lebih (kurang dibagi) diberikan kepada ahli waris pertama (urutan
    HeirType) yang bagiannya tidak nol. Selisih kurang (terbagi lebih) diambil
    sen demi sen dari nominal terbesar, sehingga tidak ada nominal negatif.
    """
    net = to_money(net_estate)
    amounts = {h: amount_for(f, net) for h, f in fractions.items()}
    diff = net - sum(amounts.values(), Decimal("0"))
    if diff > 0:
        target = next((h for h in HeirType if h in fractions and not fractions[h].is_zero), None)
        if target is None:
            raise InternalInvariantViolation("Tidak ada penerima untuk selisih pembulatan")
        amounts[target] += diff
    while diff < 0:
        amounts[_largest(amounts)] -= CENT
        diff += CENT
    return amounts


def amount_each(amount: Decimal, count: int) -> Decimal:
    if count <= 1:
        return amount
    return to_money(amount / count)
