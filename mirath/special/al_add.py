# mirath/special/al_add.py

from typing import Dict, List, Mapping, Tuple

from mirath.math.fraction import ZERO, Fraction
from mirath.math.weights import split_by_heads
from schemas import HeirType

HALF = Fraction(1, 2)
TWO_THIRDS = Fraction(2, 3)

FULL_SIBLINGS = (HeirType.FULL_BROTHER, HeirType.FULL_SISTER)
PATERNAL_SIBLINGS = (HeirType.HALF_BROTHER_PATERNAL, HeirType.HALF_SISTER_PATERNAL)


def _q(heirs: Mapping[HeirType, int], h: HeirType) -> int:
    return heirs.get(h, 0)


def is_al_add(siblings: Mapping[HeirType, int]) -> bool:
    has_kandung = sum(_q(siblings, h) for h in FULL_SIBLINGS) > 0
    has_seayah = sum(_q(siblings, h) for h in PATERNAL_SIBLINGS) > 0
    return has_kandung and has_seayah


def apply_al_add(pool: Fraction,
                 siblings: Mapping[HeirType, int]) -> Tuple[Dict[HeirType, Fraction], List[HeirType], List[str]]:
    """
    Mas'alah al-‘Add: saudara seayah ikut DIHITUNG untuk mengecilkan bagian kakek,
    lalu saudara kandung mengambil kembali bagian saudara seayah.

    - Ada saudara laki-laki kandung → seluruh `pool` untuk saudara kandung (2:1),
      saudara seayah gugur.
    - Hanya saudari kandung → ia mengambil maksimal 1/2 (atau 2/3 bila ≥2) dari
      seluruh harta; kelebihannya (bila ada) untuk saudara seayah (2:1).

    Return: (bagian, ahli waris yang gugur, catatan)
    """
    notes = ["Masalah al-‘Add: saudara seayah disertakan dalam perbandingan untuk mengecilkan bagian Jadd."]
    full = {h: _q(siblings, h) for h in FULL_SIBLINGS if _q(siblings, h) > 0}
    paternal = {h: _q(siblings, h) for h in PATERNAL_SIBLINGS if _q(siblings, h) > 0}

    if _q(siblings, HeirType.FULL_BROTHER) > 0:
        notes.append("Ada saudara laki-laki kandung: seluruh bagian saudara kembali ke saudara kandung.")
        return split_by_heads(pool, full), list(paternal), notes

    n = _q(siblings, HeirType.FULL_SISTER)
    cap = HALF if n == 1 else TWO_THIRDS
    sister_share = pool if pool < cap else cap
    shares: Dict[HeirType, Fraction] = {HeirType.FULL_SISTER: sister_share}
    rest = pool - sister_share
    notes.append(f"Saudari kandung mengambil {sister_share} (batas {cap}) dari bagian saudara {pool}.")

    if rest.is_zero:
        return shares, list(paternal), notes

    shares.update(split_by_heads(rest, paternal))
    notes.append(f"Sisa {rest} dibagi kepada saudara seayah (2:1).")
    return shares, [], notes
