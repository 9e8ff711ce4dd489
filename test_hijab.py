# Di dalam file: test_hijab.py

"""
Tes basis data aturan fiqh, mesin hijab, penentu furudh, pembagi ‘ashabah
dan penyelesai 'aul/radd secara terpisah (tanpa orkestrator).
"""

import pytest

from mirath.errors import UnknownMadhab
from mirath.math.fraction import ONE, ZERO, Fraction
from mirath.rules.asaba import resolve_asaba
from mirath.rules.engine import determine_furudh
from mirath.rules.fiqh import all_rule_sets, parse_madhab, rule_set_for
from mirath.rules.hijab import apply_hijab, rule_fires
from mirath.rules.loader import load_rule_set
from mirath.special.awl_radd import resolve_special_case
from mirath.special.jadd_ikhwah import choose_jadd_share
from schemas import GrandfatherPolicy, HeirType, HijabRule, Madhab, MotherVariant


def hijab(heirs, madhab="shafii"):
    return apply_hijab({HeirType(k): v for k, v in heirs.items()}, rule_set_for(madhab))


def furudh(heirs, madhab="shafii"):
    rule_set = rule_set_for(madhab)
    h = hijab(heirs, madhab)
    return determine_furudh(h.heirs, rule_set, h.partial_flags), h, rule_set


# --------------------------
# Basis data aturan
# --------------------------
class TestBasisDataAturan:

    def test_empat_madzhab_tersedia(self):
        codes = [rs.madhab for rs in all_rule_sets()]
        assert codes == [Madhab.HANAFI, Madhab.MALIKI, Madhab.SHAFII, Madhab.HANBALI]
        for rs in all_rule_sets():
            assert rs.version == "1.0.0"
            assert rs.hijab_rules

    def test_dimuat_sekali(self):
        assert rule_set_for("shafii") is rule_set_for(Madhab.SHAFII)

    def test_kode_madzhab(self):
        assert parse_madhab("HANAFI") is Madhab.HANAFI
        with pytest.raises(UnknownMadhab) as exc:
            parse_madhab("ja'fari")
        assert exc.value.code == "UnknownMadhab"
        assert exc.value.field == "madhab"

    def test_perbedaan_madzhab_dibaca_dari_data(self):
        assert rule_set_for("hanafi").grandfather_with_siblings == GrandfatherPolicy.EXCLUDE
        assert rule_set_for("shafii").grandfather_with_siblings == GrandfatherPolicy.SHARE
        assert rule_set_for("maliki").mother_with_father_and_spouse == MotherVariant.SIXTH
        assert rule_set_for("shafii").mushtaraka is True
        assert rule_set_for("hanbali").mushtaraka is False
        assert rule_set_for("hanafi").akdariyya is False
        assert not any(rs.spouse_radd for rs in all_rule_sets())

    def test_file_aturan_langsung(self):
        rs = load_rule_set(Madhab.HANBALI)
        assert rs == rule_set_for("hanbali")
        assert rs.model_config["frozen"] is True


# --------------------------
# Mesin hijab
# --------------------------
class TestMesinHijab:

    def test_anak_laki_menghalangi_saudara(self):
        result = hijab({"son": 1, "full_brother": 2, "full_sister": 1})
        assert result.blocked_heirs == (HeirType.FULL_BROTHER, HeirType.FULL_SISTER)
        assert result.heirs[HeirType.FULL_BROTHER] == 0
        assert result.heirs[HeirType.SON] == 1
        assert any("mahjūb" in line for line in result.log)

    def test_yang_mahjub_tetap_menghalangi(self):
        # saudara mahjub oleh ayah tetap menurunkan ibu ke 1/6
        result = hijab({"father": 1, "mother": 1, "full_brother": 1, "half_sister_maternal": 1})
        assert HeirType.FULL_BROTHER in result.blocked_heirs
        assert "siblings_present" in result.flags_for(HeirType.MOTHER)
        assert "father_present" in result.flags_for(HeirType.MOTHER)

    def test_hajb_nuqshan_tidak_mengubah_jumlah(self):
        result = hijab({"husband": 1, "daughter": 3})
        assert result.heirs == {HeirType.HUSBAND: 1, HeirType.DAUGHTER: 3}
        assert result.flags_for(HeirType.HUSBAND) == frozenset({"descendants_present"})
        assert result.blocked_heirs == ()

    def test_flag_hanya_untuk_yang_tidak_mahjub(self):
        result = hijab({"father": 1, "full_sister": 1, "daughter": 1})
        assert HeirType.FULL_SISTER in result.blocked_heirs
        assert HeirType.FULL_SISTER not in result.partial_flags

    def test_urutan_mahjub_mengikuti_heir_type(self):
        result = hijab({"uncle_paternal": 1, "half_sister_maternal": 1, "father": 1, "grandfather": 1})
        assert result.blocked_heirs == (
            HeirType.GRANDFATHER, HeirType.HALF_SISTER_MATERNAL, HeirType.UNCLE_PATERNAL,
        )

    def test_kakek_hanafi_menghalangi_saudara(self):
        assert HeirType.FULL_BROTHER in hijab({"grandfather": 1, "full_brother": 1}, "hanafi").blocked_heirs
        assert hijab({"grandfather": 1, "full_brother": 1}, "shafii").blocked_heirs == ()

    @pytest.mark.parametrize("madhab", ["maliki", "shafii", "hanbali"])
    def test_saudara_seayah_tidak_mahjub_selama_ada_kakek(self, madhab):
        # saudara seayah harus ikut dihitung dalam muqasamah (al-'Add)
        assert hijab({"grandfather": 1, "full_brother": 1, "half_brother_paternal": 1}, madhab).blocked_heirs == ()
        assert hijab({"grandfather": 1, "full_sister": 2, "half_sister_paternal": 1}, madhab).blocked_heirs == ()
        assert hijab({"grandfather": 1, "daughter": 1, "full_sister": 1, "half_brother_paternal": 1},
                     madhab).blocked_heirs == ()
        assert hijab({"full_brother": 1, "half_brother_paternal": 1}, madhab).blocked_heirs == (
            HeirType.HALF_BROTHER_PATERNAL,
        )
        assert hijab({"full_sister": 2, "half_sister_paternal": 1}, madhab).blocked_heirs == (
            HeirType.HALF_SISTER_PATERNAL,
        )

    def test_ayah_dan_nenek_hanbali(self):
        assert hijab({"father": 1, "grandmother": 1}, "hanbali").blocked_heirs == ()
        assert hijab({"father": 1, "grandmother": 1}, "hanafi").blocked_heirs == (HeirType.GRANDMOTHER,)

    @pytest.mark.parametrize("madhab", [m.value for m in Madhab])
    def test_idempoten(self, madhab):
        heirs = {h: 1 for h in HeirType}
        rule_set = rule_set_for(madhab)
        once = apply_hijab(heirs, rule_set)
        assert apply_hijab(once.heirs, rule_set).heirs == once.heirs

    def test_syarat_kaidah(self):
        rule = HijabRule(
            blocker=HeirType.FULL_SISTER,
            blocked=frozenset({HeirType.HALF_SISTER_PATERNAL}),
            min_count=2,
            unless_present=frozenset({HeirType.HALF_BROTHER_PATERNAL}),
        )
        assert not rule_fires(rule, {HeirType.FULL_SISTER: 1})
        assert rule_fires(rule, {HeirType.FULL_SISTER: 2})
        assert not rule_fires(rule, {HeirType.FULL_SISTER: 2, HeirType.HALF_BROTHER_PATERNAL: 1})


# --------------------------
# Penentu furudh
# --------------------------
class TestPenentuFurudh:

    def test_bagian_anak_perempuan_ditangguhkan_bersama_anak_laki(self):
        result, _, _ = furudh({"son": 1, "daughter": 2, "wife": 1})
        daughter = result.item(HeirType.DAUGHTER)
        assert daughter.residuary is True
        assert daughter.fraction == ZERO
        assert result.item(HeirType.WIFE).fraction == Fraction(1, 8)
        assert result.residual == Fraction(7, 8)

    def test_kelebihan_ditandai(self):
        result, _, _ = furudh({"husband": 1, "full_sister": 2})
        assert result.oversubscribed is True
        assert result.residual == ZERO

    def test_ayah_seperenam_plus_sisa(self):
        result, _, _ = furudh({"father": 1, "daughter": 1})
        father = result.item(HeirType.FATHER)
        assert father.fraction == Fraction(1, 6)
        assert father.residuary is True

    def test_umariyyatain(self):
        result, _, _ = furudh({"husband": 1, "mother": 1, "father": 1})
        assert result.item(HeirType.MOTHER).fraction == Fraction(1, 6)
        result, _, _ = furudh({"wife": 1, "mother": 1, "father": 1})
        assert result.item(HeirType.MOTHER).fraction == Fraction(1, 4)

    def test_takmilah(self):
        result, _, _ = furudh({"full_sister": 1, "half_sister_paternal": 2})
        assert result.item(HeirType.HALF_SISTER_PATERNAL).fraction == Fraction(1, 6)

    def test_saudari_bersama_kakek_menjadi_ashobah(self):
        result, _, _ = furudh({"grandfather": 1, "full_sister": 1}, "maliki")
        assert result.item(HeirType.FULL_SISTER).residuary is True


# --------------------------
# ‘Ashabah & kasus khusus
# --------------------------
class TestAshobahDanKasusKhusus:

    def test_sisa_dibagi_dua_banding_satu(self):
        result, h, rule_set = furudh({"son": 2, "daughter": 1, "husband": 1})
        asaba = resolve_asaba(result, h.heirs, rule_set)
        assert asaba.shares[HeirType.SON] == Fraction(3, 5)
        assert asaba.shares[HeirType.DAUGHTER] == Fraction(3, 20)
        assert asaba.residual == ZERO
        assert asaba.residuary_heirs == (HeirType.SON, HeirType.DAUGHTER)

    def test_tanpa_ashobah_menjadi_kandidat_radd(self):
        result, h, rule_set = furudh({"mother": 1, "daughter": 1})
        asaba = resolve_asaba(result, h.heirs, rule_set)
        assert asaba.residual == Fraction(1, 3)
        assert asaba.residuary_heirs == ()

    def test_al_add_saudara_seayah_gugur(self):
        result, h, rule_set = furudh(
            {"husband": 1, "grandfather": 1, "full_sister": 1, "half_sister_paternal": 1}
        )
        asaba = resolve_asaba(result, h.heirs, rule_set)
        # sisa 1/2; kakek muqasamah 1/2 × 2/4 = 1/4; saudari kandung mengambil sisa 1/4
        assert asaba.shares[HeirType.GRANDFATHER] == Fraction(1, 4)
        assert asaba.shares[HeirType.FULL_SISTER] == Fraction(1, 4)
        assert asaba.shares[HeirType.HALF_SISTER_PATERNAL] == ZERO
        assert HeirType.HALF_SISTER_PATERNAL in asaba.excluded

    def test_pilihan_terbaik_kakek(self):
        best, share, options = choose_jadd_share(Fraction(1, 3), True, 4)
        assert share == Fraction(1, 6)
        assert set(options) == {"Muqosamah", "Suds", "Tsuluts al-Baqi"}
        best, share, _ = choose_jadd_share(ONE, False, 10)
        assert (best, share) == ("Tsuluts", Fraction(1, 3))

    def test_adil_aul_radd(self):
        rule_set = rule_set_for("shafii")
        adil = resolve_special_case({HeirType.HUSBAND: Fraction(1, 4), HeirType.SON: Fraction(3, 4)}, rule_set)
        assert not adil.awl_applied and not adil.radd_applied

        aul = resolve_special_case({HeirType.HUSBAND: Fraction(1, 2), HeirType.FULL_SISTER: Fraction(2, 3)},
                                   rule_set)
        assert aul.awl_applied
        assert aul.shares[HeirType.HUSBAND] == Fraction(3, 7)

        radd = resolve_special_case({HeirType.WIFE: Fraction(1, 4), HeirType.MOTHER: Fraction(1, 3)}, rule_set)
        assert radd.radd_applied
        assert radd.shares[HeirType.WIFE] == Fraction(1, 4)
        assert radd.shares[HeirType.MOTHER] == Fraction(3, 4)

    def test_epsilon_hanya_untuk_pemicu(self):
        rule_set = rule_set_for("shafii")
        shares = {HeirType.SON: Fraction(99999, 100000)}
        assert not resolve_special_case(shares, rule_set, epsilon=1e-3).radd_applied
        assert resolve_special_case(shares, rule_set, epsilon=1e-6).shares[HeirType.SON] == ONE
