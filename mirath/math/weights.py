# mirath/math/weights.py

from typing import Dict, Mapping

from mirath.errors import InternalInvariantViolation
from mirath.math.fraction import ZERO, Fraction
from schemas import MALE_HEIRS, HeirType


def head_weight(heir: HeirType) -> int:
    """Bobot per kepala: laki-laki 2, perempuan 1 (للذكر مثل حظ الأنثيين)."""
    return 2 if heir in MALE_HEIRS else 1


def split_by_heads(pool: Fraction, members: Mapping[HeirType, int],
                   equal: bool = False) -> Dict[HeirType, Fraction]:
    """
    Bagi `pool` kepada beberapa golongan menurut jumlah kepala.
    Default 2:1 (laki-laki : perempuan); equal=True untuk bagi rata per kepala
    (saudara seibu, musytarakah, dzawil arham).
    """
    members = {h: c for h, c in members.items() if c > 0}
    if not members:
        return {}
    weights = {h: (c if equal else c * head_weight(h)) for h, c in members.items()}
    total = sum(weights.values())
    if total <= 0:
        raise InternalInvariantViolation("Total bobot pembagian harus positif")
    if pool.is_zero:
        return {h: ZERO for h in members}
    return {h: pool * w / total for h, w in weights.items()}
