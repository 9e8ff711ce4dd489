# mirath/rules/fiqh.py

"""
Basis data aturan fiqh empat madzhab.

Aturan disimpan sebagai data JSON berversi (mirath/rules/data/) dan dimuat
sekali saja. Mesin perhitungan tidak pernah bercabang berdasarkan kode
madzhab; semua perbedaan madzhab dibaca dari MadhhabRuleSet.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping, Tuple, Union

from mirath.errors import UnknownMadhab
from mirath.rules.loader import load_rule_set
from schemas import Madhab, MadhhabRuleSet

logger = logging.getLogger(__name__)


def parse_madhab(code: Union[Madhab, str]) -> Madhab:
    if isinstance(code, Madhab):
        return code
    try:
        return Madhab(str(code).strip().lower())
    except ValueError:
        raise UnknownMadhab(f"Madzhab tidak dikenal: {code!r}", field="madhab") from None


@lru_cache(maxsize=1)
def _load_all() -> Mapping[Madhab, MadhhabRuleSet]:
    rule_sets = {m: load_rule_set(m) for m in Madhab}
    for rs in rule_sets.values():
        logger.debug("Aturan %s versi %s dimuat (%d kaidah hijab)",
                     rs.madhab.value, rs.version, len(rs.hijab_rules))
    return MappingProxyType(rule_sets)


def rule_set_for(madhab: Union[Madhab, str]) -> MadhhabRuleSet:
    return _load_all()[parse_madhab(madhab)]


def all_rule_sets() -> Tuple[MadhhabRuleSet, ...]:
    rule_sets = _load_all()
    return tuple(rule_sets[m] for m in Madhab)
