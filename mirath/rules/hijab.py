# mirath/rules/hijab.py

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, List, Mapping, Set

from schemas import (
    HeirType,
    HijabKind,
    HijabResult,
    HijabRule,
    MadhhabRuleSet,
    heir_name,
)

logger = logging.getLogger(__name__)


# =========================
# Predikat kaidah hijab
# =========================
def _present(heirs: Mapping[HeirType, int], heir: HeirType) -> bool:
    return heirs.get(heir, 0) > 0


def blocker_count(rule: HijabRule, heirs: Mapping[HeirType, int]) -> int:
    """Jumlah orang penghalang: blocker + seluruh co_blockers."""
    members = {rule.blocker} | set(rule.co_blockers)
    return sum(heirs.get(h, 0) for h in members)


def rule_fires(rule: HijabRule, heirs: Mapping[HeirType, int]) -> bool:
    if blocker_count(rule, heirs) < rule.min_count:
        return False
    if not all(_present(heirs, h) for h in rule.requires_present):
        return False
    if any(_present(heirs, h) for h in rule.unless_present):
        return False
    return True


# =========================
# Mesin hijab
# =========================
def apply_hijab(heirs: Mapping[HeirType, int], rule_set: MadhhabRuleSet) -> HijabResult:
    """
    Terapkan hajb hirman (complete) dan hajb nuqshan (partial).

    Semua kaidah dievaluasi terhadap snapshot ASLI, jadi ahli waris yang
    terhalang tetap bisa menghalangi (mis. saudara yang mahjub oleh ayah tetap
    menurunkan ibu ke 1/6). Hajb nuqshan tidak mengubah jumlah orang, hanya
    menempelkan flag alasan yang dibaca oleh penentu furudh.
    """
    original: Dict[HeirType, int] = dict(heirs)
    blocked_by: Dict[HeirType, str] = {}

    # 1) Hajb hirman
    for rule in rule_set.hijab_rules:
        if rule.kind != HijabKind.COMPLETE or not rule_fires(rule, original):
            continue
        for target in rule.blocked:
            if _present(original, target) and target not in blocked_by:
                blocked_by[target] = rule.reason or f"Mahjub oleh {heir_name(rule.blocker)}"

    result_heirs = {h: (0 if h in blocked_by else c) for h, c in original.items()}

    # 2) Hajb nuqshan → flag
    flags: Dict[HeirType, Set[str]] = {}
    for rule in rule_set.hijab_rules:
        if rule.kind != HijabKind.PARTIAL or not rule_fires(rule, original):
            continue
        for target in rule.blocked:
            if _present(result_heirs, target):
                flags.setdefault(target, set()).add(rule.reason or rule.blocker.value)

    blocked = tuple(h for h in HeirType if h in blocked_by)
    log: List[str] = [f"{heir_name(h)} mahjūb: {blocked_by[h]}" for h in blocked]
    for h in HeirType:
        if h in flags:
            log.append(f"{heir_name(h)} terkena hajb nuqshan: {', '.join(sorted(flags[h]))}")

    if blocked:
        logger.debug("Hijab %s: terhalang %s", rule_set.madhab.value, [h.value for h in blocked])

    partial: Dict[HeirType, FrozenSet[str]] = {h: frozenset(v) for h, v in flags.items()}
    return HijabResult(
        heirs=result_heirs,
        blocked_heirs=blocked,
        partial_flags=partial,
        log=tuple(log),
    )
