# mirath/math/ashl.py

import math
from typing import Dict, List, Mapping

from mirath.errors import InternalInvariantViolation
from mirath.math.fraction import Fraction
from schemas import AshlInfo, ComparisonItem, HeirType

# urutan pemeriksaan penting: sama → saling masuk → ada FPB → asing
MUMATSALAH = "mumatsalah"
MUDAKHOLAH = "mudakholah"
MUWAFAQOH = "muwafaqoh"
MUBAYANAH = "mubayanah"


def bandingkan(a: int, b: int) -> ComparisonItem:
    """Nisab dua bilangan (an-nisab al-arba‘) beserta KPK-nya."""
    if a == b:
        relation = MUMATSALAH
    elif a % b == 0 or b % a == 0:
        relation = MUDAKHOLAH
    elif math.gcd(a, b) > 1:
        relation = MUWAFAQOH
    else:
        relation = MUBAYANAH
    return ComparisonItem(a=a, b=b, relation=relation, lcm=math.lcm(a, b))


def compute_ashl(denominators: List[int]) -> AshlInfo:
    """
    Ashlul Mas'alah = KPK penyebut furudh yang berbeda.
    Perbandingan tiap pasang penyebut disimpan untuk ditampilkan di langkah.
    """
    unique = sorted({d for d in denominators if d > 0})
    if not unique:
        # hanya ‘ashabah
        return AshlInfo(ashl_awal=1, ashl_akhir=1, comparisons=[])

    comparisons = [
        bandingkan(unique[i], unique[j])
        for i in range(len(unique))
        for j in range(i + 1, len(unique))
    ]
    ashl_awal = math.lcm(*unique)
    return AshlInfo(ashl_awal=ashl_awal, ashl_akhir=ashl_awal, comparisons=comparisons)


def saham_from_fractions(fractions: Mapping[HeirType, Fraction], base: int) -> Dict[HeirType, int]:
    """Saham tiap golongan = pecahan × AM; harus bilangan bulat."""
    saham: Dict[HeirType, int] = {}
    for heir, frac in fractions.items():
        value = frac * base
        if value.denominator != 1:
            raise InternalInvariantViolation(f"AM {base} tidak habis untuk bagian {frac}")
        saham[heir] = value.numerator
    return saham
