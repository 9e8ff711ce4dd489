# mirath/special/akdariyyah.py
from typing import Dict, List, Mapping, Optional, Tuple

from mirath.math.fraction import Fraction
from mirath.math.weights import split_by_heads
from schemas import HeirType

HALF = Fraction(1, 2)
SISTERS = (HeirType.FULL_SISTER, HeirType.HALF_SISTER_PATERNAL)


def _q(heirs: Mapping[HeirType, int], h: HeirType) -> int:
    return heirs.get(h, 0)


def _sister(heirs: Mapping[HeirType, int]) -> Optional[HeirType]:
    present = [h for h in SISTERS if _q(heirs, h) > 0]
    if len(present) == 1 and _q(heirs, present[0]) == 1:
        return present[0]
    return None


def is_akdariyyah(heirs: Mapping[HeirType, int]) -> bool:
    # tepat: suami, ibu, kakek, satu saudari kandung/seayah, tanpa ahli waris lain
    core = {HeirType.HUSBAND, HeirType.MOTHER, HeirType.GRANDFATHER}
    if any(_q(heirs, h) != 1 for h in core):
        return False
    sister = _sister(heirs)
    if sister is None:
        return False
    others = [h for h, c in heirs.items() if c > 0 and h not in core and h != sister]
    return not others


def prepare_akdariyyah(shares: Mapping[HeirType, Fraction],
                       heirs: Mapping[HeirType, int]) -> Tuple[Dict[HeirType, Fraction], List[str]]:
    """
    Sebelum 'aul: Ukht diberi fard 1/2 (Zawj 1/2, Umm 1/3, Jadd 1/6) → AM 6 ber-'aul ke 9.
    """
    sister = _sister(heirs)
    result = dict(shares)
    result[sister] = HALF
    notes = [
        "Masalah Akdariyyah terdeteksi: Zawj, Umm, Jadd, Ukht tanpa keturunan & ayah.",
        "Ukht diberi fard 1/2 sehingga masalah ber-'aul.",
    ]
    return result, notes


def finish_akdariyyah(shares: Mapping[HeirType, Fraction],
                      heirs: Mapping[HeirType, int]) -> Tuple[Dict[HeirType, Fraction], List[str]]:
    """Setelah 'aul: bagian Jadd + Ukht digabung lalu dibagi muqasamah 2:1."""
    sister = _sister(heirs)
    pool = shares[HeirType.GRANDFATHER] + shares[sister]
    result = dict(shares)
    result.update(split_by_heads(pool, {HeirType.GRANDFATHER: 1, sister: 1}))
    notes = [f"Bagian Jadd dan Ukht digabung ({pool}) lalu dibagi 2:1."]
    return result, notes
