"""
Jadd wal Ikhwah (Kakek bersama saudara kandung/seayah).

Aturan (madzhab Zaid bin Tsabit, dipakai oleh Maliki, Syafi'i, Hanbali):
1. Kakek mengambil bagian terbaik dari opsi berikut:
   - Muqosamah: berbagi dengan saudara, kakek dihitung seperti saudara laki-laki (2 kepala)
   - Suds: 1/6 dari seluruh harta (jika ada dzawil furudh lain)
   - Tsuluts al-Baqi: 1/3 dari sisa (jika ada dzawil furudh lain)
   - Tsuluts: 1/3 dari seluruh harta (jika tidak ada dzawil furudh lain)
2. Kakek minimal mendapat 1/6, walaupun harus terjadi 'aul.
3. Saudara seibu tidak termasuk (sudah mahjub oleh kakek).
"""

from typing import Dict, List, Mapping, Tuple

from mirath.math.fraction import ZERO, Fraction
from mirath.math.weights import head_weight, split_by_heads
from mirath.special.al_add import apply_al_add, is_al_add
from schemas import HeirType, heir_name

SIXTH = Fraction(1, 6)
THIRD = Fraction(1, 3)

IKHWAH = (
    HeirType.FULL_BROTHER,
    HeirType.FULL_SISTER,
    HeirType.HALF_BROTHER_PATERNAL,
    HeirType.HALF_SISTER_PATERNAL,
)


def muqosamah_heads(siblings: Mapping[HeirType, int]) -> int:
    """Kakek = 2 kepala, saudara laki-laki = 2, saudari = 1."""
    return 2 + sum(c * head_weight(h) for h, c in siblings.items())


def choose_jadd_share(remaining: Fraction, has_other_sharers: bool,
                      heads: int) -> Tuple[str, Fraction, Dict[str, Fraction]]:
    options: Dict[str, Fraction] = {}
    muqosamah = remaining * 2 / heads if remaining > ZERO else ZERO
    options["Muqosamah"] = muqosamah
    if has_other_sharers:
        options["Suds"] = SIXTH
        options["Tsuluts al-Baqi"] = remaining * THIRD if remaining > ZERO else ZERO
    else:
        options["Tsuluts"] = THIRD
    best = max(options, key=options.get)
    return best, options[best], options


def resolve_jadd_ikhwah(remaining: Fraction, has_other_sharers: bool,
                        siblings: Mapping[HeirType, int]) -> Tuple[Dict[HeirType, Fraction], List[HeirType], List[str]]:
    """
    remaining = bagian yang tersisa untuk kakek + saudara (1 − furudh ahli waris lain).
    Return: (bagian per golongan, golongan yang gugur, catatan)
    """
    heads = muqosamah_heads(siblings)
    best, jadd_share, options = choose_jadd_share(remaining, has_other_sharers, heads)

    notes = [
        "Jadd wal Ikhwah: " + "; ".join(f"{k} = {v}" for k, v in options.items())
        + f" → dipilih {best} ({jadd_share})"
    ]
    shares: Dict[HeirType, Fraction] = {HeirType.GRANDFATHER: jadd_share}

    pool = remaining - jadd_share
    if pool <= ZERO:
        notes.append("Tidak ada sisa untuk saudara; kakek tetap mendapat bagiannya.")
        return shares, list(siblings), notes

    if is_al_add(siblings):
        sibling_shares, excluded, add_notes = apply_al_add(pool, siblings)
        notes.extend(add_notes)
    else:
        sibling_shares, excluded = split_by_heads(pool, siblings), []
        detail = ", ".join(f"{heir_name(h)} ({c})" for h, c in siblings.items())
        notes.append(f"Sisa {pool} dibagi kepada saudara (2:1): {detail}")

    shares.update(sibling_shares)
    return shares, excluded, notes
