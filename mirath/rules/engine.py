# mirath/rules/engine.py

from __future__ import annotations

from typing import FrozenSet, List, Mapping, Optional, Tuple

from mirath.errors import InternalInvariantViolation
from mirath.math.fraction import ONE, ZERO, Fraction, sum_fractions
from schemas import (
    DHAWIL_ARHAM,
    FurudhItem,
    FurudhResult,
    HeirType,
    MadhhabRuleSet,
    MotherVariant,
    heir_name,
)

HALF = Fraction(1, 2)
QUARTER = Fraction(1, 4)
EIGHTH = Fraction(1, 8)
THIRD = Fraction(1, 3)
TWO_THIRDS = Fraction(2, 3)
SIXTH = Fraction(1, 6)

# Kode flag hajb nuqshan (dipasang oleh mesin hijab)
DESCENDANTS_PRESENT = "descendants_present"
FATHER_PRESENT = "father_present"
SIBLINGS_PRESENT = "siblings_present"
BROTHER_PRESENT = "brother_present"
DAUGHTER_PRESENT = "daughter_present"
FULL_SISTER_PRESENT = "full_sister_present"
GRANDFATHER_PRESENT = "grandfather_present"


# =========================
# Helper buat FurudhItem
# =========================
def _fi(heir: HeirType, count: int, fraction: Fraction, reason: str,
        residuary: bool = False) -> FurudhItem:
    return FurudhItem(heir=heir, count=count, fraction=fraction, residuary=residuary, reason=reason)


def _asabah(heir: HeirType, count: int, reason: str = "Ashobah") -> FurudhItem:
    return FurudhItem(heir=heir, count=count, fraction=ZERO, residuary=True, reason=reason)


def _mother_share(flags: FrozenSet[str], rule_set: MadhhabRuleSet,
                  spouse_share: Fraction) -> Tuple[Fraction, str]:
    if DESCENDANTS_PRESENT in flags:
        return SIXTH, "Ibu mendapat 1/6 karena pewaris punya anak"
    if SIBLINGS_PRESENT in flags:
        return SIXTH, "Ibu mendapat 1/6 karena ada dua saudara atau lebih"
    if FATHER_PRESENT in flags:
        if spouse_share:
            variant = rule_set.mother_with_father_and_spouse
        else:
            variant = rule_set.mother_with_father_only
        if variant == MotherVariant.SIXTH:
            return SIXTH, "Ibu mendapat 1/6 bersama ayah"
        if variant == MotherVariant.THIRD_OF_REMAINDER:
            share = (ONE - spouse_share) * THIRD
            return share, f"Ibu mendapat 1/3 sisa (‘Umariyyatain) = {share}"
        return THIRD, "Ibu mendapat 1/3 bersama ayah"
    return THIRD, "Ibu mendapat 1/3 karena tidak ada anak dan saudara"


def _sister_item(heir: HeirType, count: int, flags: FrozenSet[str],
                 takmila: bool = False) -> FurudhItem:
    name = heir_name(heir)
    if BROTHER_PRESENT in flags:
        return _asabah(heir, count, f"{name} menjadi Ashobah bil ghair bersama saudara laki-lakinya (2:1)")
    if GRANDFATHER_PRESENT in flags:
        return _asabah(heir, count, f"{name} bermuqasamah bersama kakek")
    if DAUGHTER_PRESENT in flags:
        return _asabah(heir, count, f"{name} menjadi Ashobah ma‘al ghair bersama anak perempuan")
    if takmila:
        return _fi(heir, count, SIXTH, f"{name} mendapat 1/6 penyempurna 2/3 (takmilah)")
    if count == 1:
        return _fi(heir, count, HALF, f"{name} mendapat 1/2 karena sendirian")
    return _fi(heir, count, TWO_THIRDS, f"{name} ({count} orang) berbagi 2/3")


# =========================
# Mesin penentu furūḍ
# =========================
def determine_furudh(heirs: Mapping[HeirType, int],
                     rule_set: MadhhabRuleSet,
                     partial_flags: Optional[Mapping[HeirType, FrozenSet[str]]] = None) -> FurudhResult:
    """
    Menghasilkan daftar FurudhItem (furūḍ & ‘ashabah) dari ahli waris yang
    sudah melewati hijab.

    Catatan:
      - Bagian kelompok (istri, nenek, 2/3 anak perempuan, 1/3 saudara seibu)
        adalah bagian GOLONGAN, tidak dikali jumlah orang.
      - Hajb nuqshan dibaca dari partial_flags, tidak dihitung ulang di sini.
      - 'Aul tidak diterapkan di tahap ini; kelebihan hanya ditandai.
    """
    flags = partial_flags or {}
    items: List[FurudhItem] = []

    def q(h: HeirType) -> int:
        return heirs.get(h, 0)

    def f(h: HeirType) -> FrozenSet[str]:
        return flags.get(h, frozenset())

    # -----------------------
    # 1) Suami / Istri
    # -----------------------
    spouse_share = ZERO
    if q(HeirType.HUSBAND) > 0:
        if DESCENDANTS_PRESENT in f(HeirType.HUSBAND):
            spouse_share = QUARTER
            items.append(_fi(HeirType.HUSBAND, q(HeirType.HUSBAND), QUARTER,
                             "Suami mendapat 1/4 karena pewaris punya anak"))
        else:
            spouse_share = HALF
            items.append(_fi(HeirType.HUSBAND, q(HeirType.HUSBAND), HALF,
                             "Suami mendapat 1/2 karena pewaris tidak punya anak"))

    if q(HeirType.WIFE) > 0:
        if DESCENDANTS_PRESENT in f(HeirType.WIFE):
            wife_share, why = EIGHTH, "1/8 karena pewaris punya anak"
        else:
            wife_share, why = QUARTER, "1/4 karena pewaris tidak punya anak"
        spouse_share = spouse_share + wife_share
        if q(HeirType.WIFE) > 1:
            why += f" (dibagi {q(HeirType.WIFE)} orang)"
        items.append(_fi(HeirType.WIFE, q(HeirType.WIFE), wife_share, f"Istri mendapat {why}"))

    # -----------------------
    # 2) Anak
    # -----------------------
    has_son = q(HeirType.SON) > 0
    if has_son:
        items.append(_asabah(HeirType.SON, q(HeirType.SON), "Anak laki-laki adalah Ashobah bin nafsi"))

    if q(HeirType.DAUGHTER) > 0:
        n = q(HeirType.DAUGHTER)
        if has_son:
            items.append(_asabah(HeirType.DAUGHTER, n,
                                 "Anak perempuan menjadi Ashobah bil ghair bersama anak laki-laki (2:1)"))
        elif n == 1:
            items.append(_fi(HeirType.DAUGHTER, n, HALF, "Anak perempuan mendapat 1/2 karena sendirian"))
        else:
            items.append(_fi(HeirType.DAUGHTER, n, TWO_THIRDS,
                             f"Anak perempuan ({n} orang) berbagi 2/3"))

    # -----------------------
    # 3) Ayah & Kakek
    # -----------------------
    for ancestor in (HeirType.FATHER, HeirType.GRANDFATHER):
        if q(ancestor) <= 0:
            continue
        name = heir_name(ancestor)
        if DESCENDANTS_PRESENT in f(ancestor):
            if has_son:
                items.append(_fi(ancestor, q(ancestor), SIXTH,
                                 f"{name} mendapat 1/6 karena ada anak laki-laki"))
            else:
                items.append(_fi(ancestor, q(ancestor), SIXTH,
                                 f"{name} mendapat 1/6 + sisa (Ashobah) karena hanya ada anak perempuan",
                                 residuary=True))
        else:
            items.append(_asabah(ancestor, q(ancestor), f"{name} adalah Ashobah bin nafsi"))

    # -----------------------
    # 4) Ibu & Nenek
    # -----------------------
    if q(HeirType.MOTHER) > 0:
        share, why = _mother_share(f(HeirType.MOTHER), rule_set, spouse_share)
        items.append(_fi(HeirType.MOTHER, q(HeirType.MOTHER), share, why))

    if q(HeirType.GRANDMOTHER) > 0:
        items.append(_fi(HeirType.GRANDMOTHER, q(HeirType.GRANDMOTHER), SIXTH,
                         "Nenek mendapat 1/6"))

    # -----------------------
    # 5) Saudara kandung & seayah
    # -----------------------
    if q(HeirType.FULL_BROTHER) > 0:
        items.append(_asabah(HeirType.FULL_BROTHER, q(HeirType.FULL_BROTHER),
                             "Saudara kandung adalah Ashobah bin nafsi"))

    full_sister_item = None
    if q(HeirType.FULL_SISTER) > 0:
        full_sister_item = _sister_item(HeirType.FULL_SISTER, q(HeirType.FULL_SISTER),
                                        f(HeirType.FULL_SISTER))
        items.append(full_sister_item)

    if q(HeirType.HALF_BROTHER_PATERNAL) > 0:
        items.append(_asabah(HeirType.HALF_BROTHER_PATERNAL, q(HeirType.HALF_BROTHER_PATERNAL),
                             "Saudara seayah adalah Ashobah bin nafsi"))

    if q(HeirType.HALF_SISTER_PATERNAL) > 0:
        takmila = (
            FULL_SISTER_PRESENT in f(HeirType.HALF_SISTER_PATERNAL)
            and full_sister_item is not None
            and not full_sister_item.residuary
            and full_sister_item.fraction == HALF
        )
        items.append(_sister_item(HeirType.HALF_SISTER_PATERNAL, q(HeirType.HALF_SISTER_PATERNAL),
                                  f(HeirType.HALF_SISTER_PATERNAL), takmila=takmila))

    # -----------------------
    # 6) Saudara seibu (laki-laki & perempuan sama rata)
    # -----------------------
    maternal = [h for h in (HeirType.HALF_BROTHER_MATERNAL, HeirType.HALF_SISTER_MATERNAL) if q(h) > 0]
    heads = sum(q(h) for h in maternal)
    for h in maternal:
        if heads == 1:
            items.append(_fi(h, 1, SIXTH, f"{heir_name(h)} mendapat 1/6 karena sendirian"))
        else:
            share = THIRD * q(h) / heads
            items.append(_fi(h, q(h), share,
                             f"{heir_name(h)} ikut berbagi 1/3 saudara seibu per kepala ({q(h)}/{heads})"))

    # -----------------------
    # 7) ‘Ashabah jauh & dzawil arham
    # -----------------------
    if q(HeirType.NEPHEW_FROM_BROTHER) > 0:
        items.append(_asabah(HeirType.NEPHEW_FROM_BROTHER, q(HeirType.NEPHEW_FROM_BROTHER),
                             "Keponakan laki-laki adalah Ashobah bin nafsi"))
    if q(HeirType.UNCLE_PATERNAL) > 0:
        items.append(_asabah(HeirType.UNCLE_PATERNAL, q(HeirType.UNCLE_PATERNAL),
                             "Paman adalah Ashobah bin nafsi"))
    for h in HeirType:
        if h in DHAWIL_ARHAM and q(h) > 0:
            items.append(_asabah(h, q(h), f"{heir_name(h)} termasuk dzawil arham"))

    # -----------------------
    # Sisa
    # -----------------------
    total = sum_fractions(i.fraction for i in items)
    oversubscribed = total > ONE
    residual = ZERO if oversubscribed else ONE - total
    if residual < ZERO:
        raise InternalInvariantViolation(f"Sisa negatif setelah furudh: {residual}")

    return FurudhResult(items=tuple(items), residual=residual, oversubscribed=oversubscribed)
