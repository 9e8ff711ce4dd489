# Di dalam file: schemas.py

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Dict, FrozenSet, List, Optional, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    PlainValidator,
    WithJsonSchema,
)

from mirath.math.fraction import ZERO, Fraction


# --- Enumerasi tertutup (batas input) ---
class Madhab(str, Enum):
    HANAFI = "hanafi"
    MALIKI = "maliki"
    SHAFII = "shafii"
    HANBALI = "hanbali"


class HeirType(str, Enum):
    # Urutan anggota = urutan prioritas kanonik (dipakai untuk sisa pembulatan)
    HUSBAND = "husband"
    WIFE = "wife"
    SON = "son"
    DAUGHTER = "daughter"
    FATHER = "father"
    MOTHER = "mother"
    GRANDFATHER = "grandfather"
    GRANDMOTHER = "grandmother"
    FULL_BROTHER = "full_brother"
    FULL_SISTER = "full_sister"
    HALF_BROTHER_PATERNAL = "half_brother_paternal"
    HALF_SISTER_PATERNAL = "half_sister_paternal"
    HALF_BROTHER_MATERNAL = "half_brother_maternal"
    HALF_SISTER_MATERNAL = "half_sister_maternal"
    NEPHEW_FROM_BROTHER = "nephew_from_brother"
    NIECE_FROM_BROTHER = "niece_from_brother"
    UNCLE_PATERNAL = "uncle_paternal"
    UNCLE_MATERNAL = "uncle_maternal"
    AUNT_PATERNAL = "aunt_paternal"
    AUNT_MATERNAL = "aunt_maternal"


# Nama Indonesia & Arab tiap ahli waris
HEIR_LABELS: Dict[HeirType, Tuple[str, str]] = {
    HeirType.HUSBAND: ("Suami", "زوج"),
    HeirType.WIFE: ("Istri", "زوجة"),
    HeirType.SON: ("Anak Laki-laki", "ابن"),
    HeirType.DAUGHTER: ("Anak Perempuan", "بنت"),
    HeirType.FATHER: ("Ayah", "أب"),
    HeirType.MOTHER: ("Ibu", "أم"),
    HeirType.GRANDFATHER: ("Kakek", "جد"),
    HeirType.GRANDMOTHER: ("Nenek dari Ayah", "جدة لأب"),
    HeirType.FULL_BROTHER: ("Saudara Laki-laki Kandung", "أخ شقيق"),
    HeirType.FULL_SISTER: ("Saudari Kandung", "أخت شقيقة"),
    HeirType.HALF_BROTHER_PATERNAL: ("Saudara Laki-laki Seayah", "أخ لأب"),
    HeirType.HALF_SISTER_PATERNAL: ("Saudari Seayah", "أخت لأب"),
    HeirType.HALF_BROTHER_MATERNAL: ("Saudara Laki-laki Seibu", "أخ لأم"),
    HeirType.HALF_SISTER_MATERNAL: ("Saudari Seibu", "أخت لأم"),
    HeirType.NEPHEW_FROM_BROTHER: ("Keponakan Laki-laki (dari Saudara Laki-laki)", "ابن الأخ"),
    HeirType.NIECE_FROM_BROTHER: ("Keponakan Perempuan (dari Saudara Laki-laki)", "بنت الأخ"),
    HeirType.UNCLE_PATERNAL: ("Paman dari Ayah", "عم"),
    HeirType.UNCLE_MATERNAL: ("Paman dari Ibu", "خال"),
    HeirType.AUNT_PATERNAL: ("Bibi dari Ayah", "عمة"),
    HeirType.AUNT_MATERNAL: ("Bibi dari Ibu", "خالة"),
}

SPOUSES = frozenset({HeirType.HUSBAND, HeirType.WIFE})
DHAWIL_ARHAM = frozenset({
    HeirType.NIECE_FROM_BROTHER,
    HeirType.UNCLE_MATERNAL,
    HeirType.AUNT_PATERNAL,
    HeirType.AUNT_MATERNAL,
})
# Laki-laki mendapat bobot 2 dalam pembagian ‘ashabah (2:1)
MALE_HEIRS = frozenset({
    HeirType.HUSBAND,
    HeirType.SON,
    HeirType.FATHER,
    HeirType.GRANDFATHER,
    HeirType.FULL_BROTHER,
    HeirType.HALF_BROTHER_PATERNAL,
    HeirType.HALF_BROTHER_MATERNAL,
    HeirType.NEPHEW_FROM_BROTHER,
    HeirType.UNCLE_PATERNAL,
    HeirType.UNCLE_MATERNAL,
})


def heir_name(heir: HeirType) -> str:
    return HEIR_LABELS[heir][0]


# --- Pecahan eksak di dalam model pydantic ---
def _parse_fraction(value: Any) -> Fraction:
    if isinstance(value, Fraction):
        return value
    try:
        if isinstance(value, str):
            return Fraction.from_string(value)
        if isinstance(value, int) and not isinstance(value, bool):
            return Fraction(value)
        if isinstance(value, dict):
            return Fraction.from_data(value)
    except (ValueError, KeyError, ZeroDivisionError) as exc:
        raise ValueError(f"Pecahan tidak sah: {value!r}") from exc
    raise ValueError(f"Pecahan tidak sah: {value!r}")


FractionField = Annotated[
    Fraction,
    PlainValidator(_parse_fraction),
    PlainSerializer(str, return_type=str, when_used="json"),
    WithJsonSchema({"type": "string", "examples": ["1/4"]}),
]


# --- Skema Input untuk Kalkulasi ---
class EstateData(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: Decimal                       # Harta peninggalan (tirkah) kotor
    funeral_costs: Decimal = Decimal("0")  # Biaya pengurusan jenazah
    debts: Decimal = Decimal("0")          # Hutang
    bequest: Decimal = Decimal("0")        # Wasiat

    @property
    def net_estate(self) -> Decimal:
        return self.total - self.funeral_costs - self.debts - self.bequest


class CalculationInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    madhab: str                # kode madzhab mentah, divalidasi di calculator
    estate: EstateData
    heirs: Dict[str, int]      # kunci mentah ("husband", "son", ...) → jumlah orang


# --- Skema Aturan Fiqh per Madzhab ---
class HijabKind(str, Enum):
    COMPLETE = "complete"   # hajb hirman
    PARTIAL = "partial"     # hajb nuqshan


class GrandfatherPolicy(str, Enum):
    EXCLUDE = "exclude"     # kakek menghalangi saudara
    SHARE = "share"         # kakek muqasamah bersama saudara


class MotherVariant(str, Enum):
    THIRD = "third"
    SIXTH = "sixth"
    THIRD_OF_REMAINDER = "third_of_remainder"   # tsulus al-baqi (‘Umariyyatain)


class HijabRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    blocker: HeirType
    blocked: FrozenSet[HeirType]
    kind: HijabKind = HijabKind.COMPLETE
    reason: Optional[str] = None
    min_count: int = 1
    co_blockers: FrozenSet[HeirType] = frozenset()       # jumlahnya ikut dihitung bersama blocker
    requires_present: FrozenSet[HeirType] = frozenset()
    unless_present: FrozenSet[HeirType] = frozenset()


class MadhhabRuleSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    madhab: Madhab
    version: str
    name: str
    description: str = ""
    grandfather_with_siblings: GrandfatherPolicy
    mother_with_father_only: MotherVariant
    mother_with_father_and_spouse: MotherVariant
    spouse_radd: bool = False
    mushtaraka: bool = False
    akdariyya: bool = False
    hijab_rules: Tuple[HijabRule, ...] = ()


class MadhabInfo(BaseModel):
    code: Madhab
    name: str
    version: str
    description: str


# --- Skema hasil antara (tiap tahap mesin) ---
class HijabResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    heirs: Dict[HeirType, int]                       # snapshot setelah hajb hirman
    blocked_heirs: Tuple[HeirType, ...] = ()
    partial_flags: Dict[HeirType, FrozenSet[str]] = {}
    log: Tuple[str, ...] = ()

    def flags_for(self, heir: HeirType) -> FrozenSet[str]:
        return self.partial_flags.get(heir, frozenset())


class FurudhItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    heir: HeirType
    count: int
    fraction: FractionField = ZERO   # bagian fard (0 untuk ‘ashabah murni)
    residuary: bool = False          # ikut menerima sisa (‘ashabah)
    reason: str


class FurudhResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: Tuple[FurudhItem, ...]
    residual: FractionField
    oversubscribed: bool = False

    def item(self, heir: HeirType) -> Optional[FurudhItem]:
        return next((i for i in self.items if i.heir == heir), None)

    def fixed_shares(self) -> Dict[HeirType, Fraction]:
        return {i.heir: i.fraction for i in self.items if not i.fraction.is_zero}


class AsabaResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    shares: Dict[HeirType, FractionField]
    residual: FractionField                      # sisa yang belum terserap (kandidat radd)
    residuary_heirs: Tuple[HeirType, ...] = ()
    excluded: Tuple[HeirType, ...] = ()          # gugur dalam muqasamah kakek
    blood_relatives_applied: bool = False
    notes: Tuple[str, ...] = ()


class SpecialCaseResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    shares: Dict[HeirType, FractionField]
    awl_applied: bool = False
    radd_applied: bool = False
    notes: Tuple[str, ...] = ()


# --- Skema untuk Perbandingan Pecahan Furudh ---
class ComparisonItem(BaseModel):
    a: int                   # bilangan pertama
    b: int                   # bilangan kedua
    relation: str            # mumatsalah, mudakholah, muwafaqoh, mubayanah
    lcm: Optional[int] = None


# --- Skema untuk Aslul Mas'alah ---
class AshlInfo(BaseModel):
    ashl_awal: int                     # AM dari penyebut furudh
    ashl_akhir: int                    # AM setelah aul/radd/tashih
    comparisons: List[ComparisonItem]
    total_saham: int = 0
    status: str = "adil"               # "adil", "aul", "radd"


# --- Skema Output ---
class CalculationStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    step_number: int
    title: str
    description: str
    tag: str
    details: Dict[str, Any] = {}


class ShareRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    heir: HeirType
    name: str
    name_ar: str
    count: int
    fraction: FractionField
    saham: int               # saham kelompok dari Ashlul Mas'alah akhir
    amount: Decimal          # nominal total kelompok
    amount_each: Decimal     # nominal per orang
    reason: str


class CalculationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    madhab: Optional[Madhab] = None
    net_estate: Optional[Decimal] = None
    final_base: int = 0
    shares: Tuple[ShareRecord, ...] = ()
    blocked_heirs: Tuple[HeirType, ...] = ()
    awl_applied: bool = False
    radd_applied: bool = False
    blood_relatives_applied: bool = False
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    steps: Tuple[CalculationStep, ...] = ()
    calculation_time_ms: float = 0.0
    error_code: Optional[str] = None
    error: Optional[str] = None

    def share_for(self, heir: HeirType) -> Optional[ShareRecord]:
        return next((s for s in self.shares if s.heir == heir), None)


# --- Skema Riwayat (audit log) ---
class CalculationRecord(BaseModel):
    id: int
    created_at: datetime
    madhab: Optional[str] = None
    success: bool
    estate_total: Optional[float] = None
    duration_ms: float
    error_code: Optional[str] = None
    input_snapshot: Dict[str, Any]
    result: Dict[str, Any]
    model_config = ConfigDict(from_attributes=True)


class HistoryStats(BaseModel):
    total: int
    successful: int
    failed: int
    success_rate: float
    average_duration_ms: float
    by_madhab: Dict[str, int]
