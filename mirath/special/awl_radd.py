# mirath/special/awl_radd.py

from __future__ import annotations

import logging
from math import lcm
from typing import Dict, List, Mapping

from mirath.errors import InternalInvariantViolation
from mirath.math.fraction import ONE, Fraction, sum_fractions
from schemas import SPOUSES, HeirType, MadhhabRuleSet, SpecialCaseResult, heir_name

logger = logging.getLogger(__name__)

DEFAULT_EPSILON = 1e-4

# --------------------------
# AUL yang sah (kitab)
# --------------------------
VALID_AUL = {
    6: {7, 8, 9, 10},
    12: {13, 15, 17},
    24: {27},
}


def apply_awl(shares: Mapping[HeirType, Fraction], total: Fraction,
              notes: List[str]) -> Dict[HeirType, Fraction]:
    """Semua bagian dikali 1/total (eksak), sehingga jumlahnya tepat 1."""
    notes.append(f"Terjadi Aul: total bagian {total} > 1, setiap bagian dikali {ONE / total}")
    # catatan gaya kitab: AM awal → AM akhir
    ashl = lcm(*(f.denominator for f in shares.values()))
    awled = (total * ashl).numerator
    notes.append(f"Ashlul Mas'alah diganti: dari {ashl} menjadi AM akhir {awled}")
    if ashl in VALID_AUL and awled in VALID_AUL[ashl]:
        notes.append("Aul ini adalah kasus klasik yang umum")
    return {h: f / total for h, f in shares.items()}


def apply_radd(shares: Mapping[HeirType, Fraction], total: Fraction,
               rule_set: MadhhabRuleSet, notes: List[str]) -> Dict[HeirType, Fraction]:
    """
    Radd: sisa dikembalikan kepada ashhabul furudh secara proporsional.
    Suami/istri hanya ikut bila rule_set.spouse_radd, atau bila tidak ada
    penerima lain sama sekali.
    """
    gap = ONE - total
    holders = [h for h, f in shares.items() if not f.is_zero]
    if rule_set.spouse_radd:
        eligible = holders
    else:
        eligible = [h for h in holders if h not in SPOUSES]
    if not eligible:
        eligible = [h for h in holders if h in SPOUSES]
        if eligible:
            notes.append("Tidak ada penerima radd selain suami/istri: sisa dikembalikan kepada suami/istri.")
    if not eligible:
        raise InternalInvariantViolation("Radd tanpa penerima: tidak ada bagian yang bisa ditambah")

    base = sum_fractions(shares[h] for h in eligible)
    result = dict(shares)
    for h in eligible:
        result[h] = shares[h] + gap * shares[h] / base
    names = ", ".join(heir_name(h) for h in eligible)
    notes.append(f"Radd: sisa {gap} dibagi proporsional dengan dasar {base} kepada {names}.")
    return result


def resolve_special_case(shares: Mapping[HeirType, Fraction],
                         rule_set: MadhhabRuleSet,
                         epsilon: float = DEFAULT_EPSILON) -> SpecialCaseResult:
    """
    Putuskan Adil / Aul / Radd. Epsilon hanya dipakai untuk memutuskan pemicu;
    penskalaan selalu eksak. Aul dan Radd tidak pernah terjadi bersamaan.
    """
    notes: List[str] = []
    total = sum_fractions(shares.values())
    diff = total.to_float() - 1.0

    if diff > epsilon:
        result = apply_awl(shares, total, notes)
        logger.debug("Aul %s: total %s", rule_set.madhab.value, total)
        return SpecialCaseResult(shares=result, awl_applied=True, notes=tuple(notes))

    if -diff > epsilon:
        result = apply_radd(shares, total, rule_set, notes)
        logger.debug("Radd %s: total %s", rule_set.madhab.value, total)
        return SpecialCaseResult(shares=result, radd_applied=True, notes=tuple(notes))

    notes.append("Total bagian = 1 → masalah Adil")
    return SpecialCaseResult(shares=dict(shares), notes=tuple(notes))
