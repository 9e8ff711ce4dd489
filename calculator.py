# calculator.py

from __future__ import annotations

import logging
import time
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

import schemas
from config import Settings, get_settings
from mirath.errors import InputValidationError, InternalInvariantViolation
from mirath.math.amounts import amount_each, distribute_amounts, to_money
from mirath.math.ashl import compute_ashl, saham_from_fractions
from mirath.math.fraction import ONE, Fraction, sum_fractions
from mirath.math.inkisar import compute_inkisar_multiplier
from mirath.rules.asaba import resolve_asaba
from mirath.rules.engine import determine_furudh
from mirath.rules.fiqh import parse_madhab, rule_set_for
from mirath.rules.hijab import apply_hijab
from mirath.special.router import apply_special_cases
from mirath.validation import validate_estate, validate_heirs
from schemas import HEIR_LABELS, HeirType

logger = logging.getLogger(__name__)

# --------------------------
# Nilai keyakinan (advisory)
# --------------------------
AWL_PENALTY = 0.02
RADD_PENALTY = 0.01
SLOW_PENALTY = 0.01
MIN_CONFIDENCE = 0.85


class CalculationState(str, Enum):
    VALIDATING = "validating"
    ESTATE_NETTED = "estate_netted"
    HIJAB_APPLIED = "hijab_applied"
    FIXED_SHARES_COMPUTED = "fixed_shares_computed"
    RESIDUARY_RESOLVED = "residuary_resolved"
    SPECIAL_CASE_RESOLVED = "special_case_resolved"
    AMOUNTS_FINALIZED = "amounts_finalized"
    DONE = "done"
    FAILED = "failed"


# --------------------------
# Helper umum
# --------------------------
class _Trace:
    """Pencatat langkah perhitungan (hanya ditulis, tidak pernah dibaca balik)."""

    def __init__(self) -> None:
        self.steps: List[schemas.CalculationStep] = []
        self.state = CalculationState.VALIDATING

    def add(self, title: str, description: str, tag: str,
            details: Optional[Dict[str, Any]] = None) -> None:
        self.steps.append(schemas.CalculationStep(
            step_number=len(self.steps) + 1,
            title=title,
            description=description,
            tag=tag,
            details=details or {},
        ))

    def move(self, state: CalculationState) -> None:
        logger.debug("State %s → %s", self.state.value, state.value)
        self.state = state


def _fractions_text(shares: Dict[HeirType, Fraction]) -> Dict[str, str]:
    return {h.value: str(f) for h, f in shares.items()}


def _confidence(awl: bool, radd: bool, elapsed_ms: float, settings: Settings) -> float:
    score = 1.0
    if awl:
        score -= AWL_PENALTY
    if radd:
        score -= RADD_PENALTY
    if elapsed_ms > settings.slow_calculation_ms:
        score -= SLOW_PENALTY
    return max(MIN_CONFIDENCE, round(score, 4))


def _failure(trace: _Trace, exc: InputValidationError, madhab: Optional[schemas.Madhab],
             started: float) -> schemas.CalculationResult:
    trace.move(CalculationState.FAILED)
    trace.add("Validasi gagal", exc.message, "error", {"code": exc.code, "field": exc.field})
    logger.info("Perhitungan ditolak: %s (%s)", exc.code, exc.message)
    return schemas.CalculationResult(
        success=False,
        madhab=madhab,
        steps=tuple(trace.steps),
        calculation_time_ms=(time.perf_counter() - started) * 1000,
        error_code=exc.code,
        error=exc.message,
    )


def _final_base(fractions: Dict[HeirType, Fraction], counts: Dict[HeirType, int],
                ashl_info: schemas.AshlInfo, trace: _Trace) -> Dict[HeirType, int]:
    """AM akhir = KPK penyebut bagian akhir, lalu tashih inkisār per kepala."""
    base = compute_ashl([f.denominator for f in fractions.values() if not f.is_zero]).ashl_awal
    saham = saham_from_fractions(fractions, base)
    groups = [
        (HEIR_LABELS[h][0], counts[h], saham[h])
        for h in fractions
        if counts.get(h, 0) > 1 and saham[h] > 0
    ]
    multiplier, comps, notes = compute_inkisar_multiplier(groups)
    if multiplier > 1:
        trace.add(
            "Tashih inkisār",
            " ".join(notes),
            "inkisar",
            {"multiplier": multiplier, "comparisons": [c.model_dump() for c in comps]},
        )
        base *= multiplier
        saham = {h: s * multiplier for h, s in saham.items()}
    ashl_info.ashl_akhir = base
    ashl_info.total_saham = sum(saham.values())
    return saham


# ============================================================
#                    FUNGSI UTAMA
# ============================================================
def calculate_inheritance(calculation_input: schemas.CalculationInput,
                          rule_set: Optional[schemas.MadhhabRuleSet] = None,
                          settings: Optional[Settings] = None) -> schemas.CalculationResult:
    """
    Hitung pembagian waris untuk satu madzhab.

    Alur: Validating → EstateNetted → HijabApplied → FixedSharesComputed →
    ResiduaryResolved → SpecialCaseResolved → AmountsFinalized → Done.
    Input yang tidak sah menghasilkan CalculationResult(success=False);
    pelanggaran invarian internal dan pembagian dengan nol dilempar.
    `rule_set` dapat diganti (mis. untuk pengujian); bila kosong diambil dari
    basis data aturan sesuai madzhab.
    """
    settings = settings or get_settings()
    started = time.perf_counter()
    trace = _Trace()
    madhab: Optional[schemas.Madhab] = None

    # 1) Validasi
    try:
        madhab = parse_madhab(calculation_input.madhab)
        if rule_set is None:
            rule_set = rule_set_for(madhab)
        else:
            madhab = rule_set.madhab
        net_estate = validate_estate(calculation_input.estate)
        heirs = validate_heirs(calculation_input.heirs)
    except InputValidationError as exc:
        return _failure(trace, exc, madhab, started)

    trace.add(
        "Validasi input",
        f"Madzhab {rule_set.name} ({rule_set.madhab.value}, aturan versi {rule_set.version}); "
        f"{sum(heirs.values())} ahli waris dari {len(heirs)} golongan",
        "validation",
        {"madhab": rule_set.madhab.value, "heirs": {h.value: c for h, c in heirs.items()}},
    )

    # 2) Harta bersih
    trace.move(CalculationState.ESTATE_NETTED)
    net_estate = to_money(net_estate)
    estate = calculation_input.estate
    trace.add(
        "Menghitung harta bersih",
        f"{estate.total} − biaya jenazah {estate.funeral_costs} − hutang {estate.debts} "
        f"− wasiat {estate.bequest} = {net_estate}",
        "estate",
        {"total": str(estate.total), "net_estate": str(net_estate)},
    )

    # 3) Hijab
    trace.move(CalculationState.HIJAB_APPLIED)
    hijab = apply_hijab(heirs, rule_set)
    trace.add(
        "Menerapkan hijab",
        "; ".join(hijab.log) if hijab.log else "Tidak ada ahli waris yang terhalang",
        "hijab",
        {"blocked": [h.value for h in hijab.blocked_heirs],
         "partial": {h.value: sorted(v) for h, v in hijab.partial_flags.items()}},
    )

    # 4) Furudh
    trace.move(CalculationState.FIXED_SHARES_COMPUTED)
    furudh = determine_furudh(hijab.heirs, rule_set, hijab.partial_flags)
    fixed = furudh.fixed_shares()
    ashl_info = compute_ashl([f.denominator for f in fixed.values()])
    trace.add(
        "Menentukan furudh ahli waris sesuai ketentuan syar’i",
        "; ".join(item.reason for item in furudh.items),
        "furudh",
        {
            "fixed": _fractions_text(fixed),
            "fixed_ar": {h.value: f.arabic_name() for h, f in fixed.items()},
            "residual": str(furudh.residual),
            "oversubscribed": furudh.oversubscribed,
            "ashl_awal": ashl_info.ashl_awal,
            "comparisons": [c.model_dump() for c in ashl_info.comparisons],
        },
    )

    # 5) ‘Ashabah
    trace.move(CalculationState.RESIDUARY_RESOLVED)
    asaba = resolve_asaba(furudh, hijab.heirs, rule_set)
    trace.add(
        "Membagikan sisa kepada ‘ashabah",
        "; ".join(asaba.notes) if asaba.notes else "Tidak ada sisa untuk ‘ashabah",
        "asaba",
        {"shares": _fractions_text(asaba.shares), "residual": str(asaba.residual),
         "residuary": [h.value for h in asaba.residuary_heirs]},
    )

    # 6) 'Aul / Radd / kasus khusus
    trace.move(CalculationState.SPECIAL_CASE_RESOLVED)
    special = apply_special_cases(asaba.shares, hijab.heirs, rule_set, settings.special_case_epsilon)
    final = dict(special.shares)
    total = sum_fractions(final.values())
    if total != ONE:
        logger.error("Invarian dilanggar: total bagian %s (madzhab %s, ahli waris %s)",
                     total, rule_set.madhab.value, heirs)
        raise InternalInvariantViolation(f"Total bagian akhir harus tepat 1, ternyata {total}")
    ashl_info.status = "aul" if special.awl_applied else "radd" if special.radd_applied else "adil"
    trace.add(
        "Memeriksa 'Aul dan Radd",
        " ".join(special.notes),
        "special",
        {"awl": special.awl_applied, "radd": special.radd_applied, "shares": _fractions_text(final)},
    )

    # 7) Nominal akhir
    trace.move(CalculationState.AMOUNTS_FINALIZED)
    counts = {item.heir: item.count for item in furudh.items}
    reasons = {item.heir: item.reason for item in furudh.items}
    saham = _final_base(final, counts, ashl_info, trace)
    amounts = distribute_amounts(final, net_estate)
    if sum(amounts.values(), Decimal("0")) != net_estate:
        logger.error("Invarian dilanggar: jumlah nominal %s != harta bersih %s",
                     sum(amounts.values(), Decimal("0")), net_estate)
        raise InternalInvariantViolation("Jumlah nominal harus sama dengan harta bersih")

    shares: List[schemas.ShareRecord] = []
    for heir in HeirType:
        if heir not in final:
            continue
        frac = final[heir]
        name_id, name_ar = HEIR_LABELS[heir]
        reason = reasons.get(heir, "")
        if frac.is_zero:
            reason = f"{reason}; tidak mendapat sisa (saqith)" if reason else "Tidak mendapat sisa"
        shares.append(schemas.ShareRecord(
            heir=heir,
            name=name_id,
            name_ar=name_ar,
            count=counts.get(heir, 1),
            fraction=frac,
            saham=saham[heir],
            amount=amounts[heir],
            amount_each=amount_each(amounts[heir], counts.get(heir, 1)),
            reason=reason,
        ))
    trace.add(
        "Menghitung nominal akhir",
        "; ".join(
            f"{s.name} = {s.saham} × {net_estate} ÷ {ashl_info.ashl_akhir} = {s.amount}" for s in shares
        ),
        "amounts",
        {"ashl_awal": ashl_info.ashl_awal, "ashl_akhir": ashl_info.ashl_akhir,
         "total_saham": ashl_info.total_saham, "status": ashl_info.status},
    )

    # 8) Selesai
    trace.move(CalculationState.DONE)
    elapsed_ms = (time.perf_counter() - started) * 1000
    trace.add("Selesai", f"Perhitungan selesai dalam {elapsed_ms:.2f} ms", "done")

    return schemas.CalculationResult(
        success=True,
        madhab=rule_set.madhab,
        net_estate=net_estate,
        final_base=ashl_info.ashl_akhir,
        shares=tuple(shares),
        blocked_heirs=hijab.blocked_heirs,
        awl_applied=special.awl_applied,
        radd_applied=special.radd_applied,
        blood_relatives_applied=asaba.blood_relatives_applied,
        confidence=_confidence(special.awl_applied, special.radd_applied, elapsed_ms, settings),
        steps=tuple(trace.steps),
        calculation_time_ms=elapsed_ms,
    )
