# mirath/special/router.py
from typing import List, Mapping

from mirath.math.fraction import Fraction
from schemas import HeirType, MadhhabRuleSet, SpecialCaseResult

from .akdariyyah import finish_akdariyyah, is_akdariyyah, prepare_akdariyyah
from .awl_radd import DEFAULT_EPSILON, resolve_special_case


def apply_special_cases(shares: Mapping[HeirType, Fraction],
                        heirs: Mapping[HeirType, int],
                        rule_set: MadhhabRuleSet,
                        epsilon: float = DEFAULT_EPSILON) -> SpecialCaseResult:
    notes: List[str] = []

    # 1) Akdariyyah (paling spesifik → cek duluan), membungkus tahap 'aul
    akdariyyah = rule_set.akdariyya and is_akdariyyah(heirs)
    if akdariyyah:
        shares, n = prepare_akdariyyah(shares, heirs)
        notes.extend(n)

    # 2) Adil / 'Aul / Radd
    result = resolve_special_case(shares, rule_set, epsilon)
    notes.extend(result.notes)
    final = dict(result.shares)

    if akdariyyah:
        final, n = finish_akdariyyah(final, heirs)
        notes.extend(n)

    return SpecialCaseResult(
        shares=final,
        awl_applied=result.awl_applied,
        radd_applied=result.radd_applied,
        notes=tuple(notes),
    )
