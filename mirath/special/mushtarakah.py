# mirath/special/mushtarakah.py
from typing import Dict, List, Mapping, Tuple

from mirath.math.fraction import Fraction, sum_fractions
from mirath.math.weights import split_by_heads
from schemas import HeirType

MATERNAL = (HeirType.HALF_BROTHER_MATERNAL, HeirType.HALF_SISTER_MATERNAL)
FULL = (HeirType.FULL_BROTHER, HeirType.FULL_SISTER)


def _q(heirs: Mapping[HeirType, int], h: HeirType) -> int:
    return heirs.get(h, 0)


def is_mushtarakah(heirs: Mapping[HeirType, int], residual: Fraction) -> bool:
    # syarat: suami, ibu/nenek, ≥2 saudara seibu, saudara laki-laki kandung, dan sisa habis
    has_zawj = _q(heirs, HeirType.HUSBAND) > 0
    has_umm = _q(heirs, HeirType.MOTHER) + _q(heirs, HeirType.GRANDMOTHER) > 0
    maternal_heads = sum(_q(heirs, h) for h in MATERNAL)
    has_akh = _q(heirs, HeirType.FULL_BROTHER) > 0
    return has_zawj and has_umm and maternal_heads >= 2 and has_akh and residual.is_zero


def apply_mushtarakah(shares: Mapping[HeirType, Fraction],
                      heirs: Mapping[HeirType, int]) -> Tuple[Dict[HeirType, Fraction], List[str]]:
    """
    Musytarakah (Himariyyah): saudara kandung digabungkan dengan saudara seibu
    dalam 1/3, dibagi rata per kepala tanpa membedakan laki-laki dan perempuan.
    """
    pool = sum_fractions(shares.get(h) for h in MATERNAL if h in shares)
    members = {h: _q(heirs, h) for h in MATERNAL + FULL if _q(heirs, h) > 0}
    result = dict(shares)
    result.update(split_by_heads(pool, members, equal=True))
    heads = sum(members.values())
    notes = [
        f"Masalah Musytarakah: saudara kandung bergabung dengan saudara seibu dalam {pool}, "
        f"dibagi rata {heads} kepala."
    ]
    return result, notes
