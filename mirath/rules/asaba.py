# mirath/rules/asaba.py

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Tuple

from mirath.math.fraction import ONE, ZERO, Fraction, sum_fractions
from mirath.math.weights import head_weight, split_by_heads
from mirath.special.jadd_ikhwah import IKHWAH, resolve_jadd_ikhwah
from mirath.special.mushtarakah import apply_mushtarakah, is_mushtarakah
from schemas import (
    DHAWIL_ARHAM,
    AsabaResult,
    FurudhResult,
    GrandfatherPolicy,
    HeirType,
    MadhhabRuleSet,
    heir_name,
)

logger = logging.getLogger(__name__)

# Urutan kekuatan ‘ashabah (jihah & qarabah); golongan pertama yang ada mengambil sisa
ASHOBAH_CLASSES: Tuple[Tuple[str, Tuple[HeirType, ...]], ...] = (
    ("anak", (HeirType.SON, HeirType.DAUGHTER)),
    ("ayah", (HeirType.FATHER,)),
    ("kakek", (HeirType.GRANDFATHER,)),
    ("saudara kandung", (HeirType.FULL_BROTHER, HeirType.FULL_SISTER)),
    ("saudara seayah", (HeirType.HALF_BROTHER_PATERNAL, HeirType.HALF_SISTER_PATERNAL)),
    ("keponakan", (HeirType.NEPHEW_FROM_BROTHER,)),
    ("paman", (HeirType.UNCLE_PATERNAL,)),
)


def _detail(members: Mapping[HeirType, int]) -> str:
    parts = []
    for h, c in members.items():
        jenis = "laki-laki" if head_weight(h) == 2 else "perempuan"
        parts.append(f"{heir_name(h)} ({c} {jenis}) → bobot {c * head_weight(h)}")
    return "; ".join(parts)


def resolve_asaba(furudh: FurudhResult,
                  heirs: Mapping[HeirType, int],
                  rule_set: MadhhabRuleSet) -> AsabaResult:
    """
    Bagikan sisa (residual) kepada ‘ashabah menurut urutan kekuatannya.

    - Dalam satu golongan: laki-laki 2 bagian, perempuan 1 bagian.
    - Anak laki-laki + anak perempuan: sisa (termasuk bagian anak perempuan
      yang ditangguhkan) dibagi 2:1.
    - Kakek bersama saudara (kebijakan "share") → Jadd wal Ikhwah.
    - Musytarakah dan dzawil arham ditangani di sini.
    - Tanpa ‘ashabah, sisa tidak dibagi dan diteruskan sebagai kandidat radd.
    """
    shares: Dict[HeirType, Fraction] = {i.heir: i.fraction for i in furudh.items}
    residuary: Dict[HeirType, int] = {i.heir: i.count for i in furudh.items if i.residuary}
    residual = furudh.residual
    notes: List[str] = []

    # 1) Musytarakah (sisa habis, saudara kandung ikut 1/3 saudara seibu)
    if rule_set.mushtaraka and is_mushtarakah(heirs, residual):
        shares, n = apply_mushtarakah(shares, heirs)
        notes.extend(n)
        joined = tuple(h for h in (HeirType.FULL_BROTHER, HeirType.FULL_SISTER) if h in residuary)
        return AsabaResult(shares=shares, residual=ZERO, residuary_heirs=joined, notes=tuple(notes))

    # 2) Jadd wal Ikhwah
    siblings = {h: residuary[h] for h in IKHWAH if h in residuary}
    if (HeirType.GRANDFATHER in residuary and siblings
            and rule_set.grandfather_with_siblings == GrandfatherPolicy.SHARE):
        others = [i for i in furudh.items
                  if i.heir != HeirType.GRANDFATHER and i.heir not in IKHWAH and not i.fraction.is_zero]
        remaining = ONE - sum_fractions(i.fraction for i in others)
        jadd_shares, excluded, n = resolve_jadd_ikhwah(remaining, bool(others), siblings)
        notes.extend(n)
        for h in (HeirType.GRANDFATHER,) + tuple(siblings):
            shares[h] = jadd_shares.get(h, ZERO)
        left = remaining - sum_fractions(jadd_shares.values())
        return AsabaResult(
            shares=shares,
            residual=left if left > ZERO else ZERO,
            residuary_heirs=(HeirType.GRANDFATHER,) + tuple(siblings),
            excluded=tuple(excluded),
            notes=tuple(notes),
        )

    # 3) Golongan ‘ashabah biasa
    for label, members in ASHOBAH_CLASSES:
        present = {h: residuary[h] for h in members if h in residuary}
        if not present:
            continue
        if residual.is_zero:
            notes.append(f"Ashobah {label} tidak mendapat sisa karena furudh telah menghabiskan harta")
        else:
            for h, part in split_by_heads(residual, present).items():
                shares[h] = shares[h] + part
            if len(present) == 1 and len(members) == 1:
                notes.append(f"{heir_name(members[0])} mendapat sisa {residual} sebagai Ashobah")
            else:
                notes.append(f"Ashobah {label} (2:1) menerima sisa {residual}: {_detail(present)}")
        return AsabaResult(shares=shares, residual=ZERO, residuary_heirs=tuple(present), notes=tuple(notes))

    # 4) Dzawil arham (tidak ada ashhabul furudh nasab & ‘ashabah)
    arham = {h: residuary[h] for h in HeirType if h in DHAWIL_ARHAM and h in residuary}
    if arham and not residual.is_zero:
        for h, part in split_by_heads(residual, arham, equal=True).items():
            shares[h] = shares[h] + part
        notes.append(f"Dzawil arham menerima sisa {residual}, dibagi rata per kepala")
        logger.debug("Dzawil arham menerima sisa %s", residual)
        return AsabaResult(
            shares=shares,
            residual=ZERO,
            residuary_heirs=tuple(arham),
            blood_relatives_applied=True,
            notes=tuple(notes),
        )

    if not residual.is_zero:
        notes.append(f"Tidak ada Ashobah: sisa {residual} menjadi kandidat Radd")
    return AsabaResult(shares=shares, residual=residual, notes=tuple(notes))
