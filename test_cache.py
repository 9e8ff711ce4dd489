# Di dalam file: test_cache.py

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest

from calculator import calculate_inheritance
from mirath.cache import CalculationCache, cached, make_key
from mirath.rules.fiqh import rule_set_for
from schemas import CalculationInput, EstateData


def make_input(heirs, madhab="shafii", total="1000"):
    return CalculationInput(madhab=madhab, estate=EstateData(total=Decimal(total)), heirs=heirs)


@pytest.fixture
def cache():
    return CalculationCache(max_size=3)


@pytest.fixture
def calculate(cache):
    return cached(cache)(calculate_inheritance)


class TestKunciCache:

    def test_input_setara_menghasilkan_kunci_sama(self):
        a = make_input({"husband": 1, "son": 2}, madhab="Shafii", total="1000.00")
        b = make_input({"son": 2, "husband": 1, "daughter": 0}, madhab=" shafii", total="1000")
        assert make_key(a) == make_key(b)

    def test_input_berbeda_menghasilkan_kunci_berbeda(self):
        a = make_input({"husband": 1, "son": 2})
        assert make_key(a) != make_key(make_input({"husband": 1, "son": 3}))
        assert make_key(a) != make_key(make_input({"husband": 1, "son": 2}, madhab="hanafi"))
        assert make_key(a) != make_key(make_input({"husband": 1, "son": 2}, total="999"))


class TestCacheLRU:

    def test_hit_dan_miss(self, cache, calculate):
        first = calculate(make_input({"husband": 1, "son": 1}))
        second = calculate(make_input({"son": 1, "husband": 1}))
        assert second is first
        stats = cache.stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == 0.5
        assert calculate.cache is cache

    def test_hasil_sama_dengan_tanpa_cache(self, calculate):
        data = make_input({"wife": 1, "mother": 1, "full_sister": 2})
        cached_result = calculate(data)
        direct = calculate_inheritance(data)
        assert [(s.heir, s.fraction, s.amount) for s in cached_result.shares] == \
            [(s.heir, s.fraction, s.amount) for s in direct.shares]

    def test_aturan_pengganti_tidak_memakai_cache(self, cache, calculate):
        rule_set = rule_set_for("shafii").model_copy(update={"spouse_radd": True})
        calculate(make_input({"husband": 1, "daughter": 1}), rule_set=rule_set)
        assert len(cache) == 0

    def test_entri_tertua_dibuang(self, cache, calculate):
        inputs = [make_input({"son": n}) for n in range(1, 5)]
        for data in inputs:
            calculate(data)
        assert len(cache) == 3
        assert cache.get(make_key(inputs[0])) is None
        assert cache.get(make_key(inputs[3])) is not None

    def test_akses_memperbarui_urutan(self, cache, calculate):
        inputs = [make_input({"son": n}) for n in range(1, 4)]
        for data in inputs:
            calculate(data)
        calculate(inputs[0])                       # son=1 menjadi terbaru
        calculate(make_input({"son": 9}))          # membuang son=2
        assert cache.get(make_key(inputs[0])) is not None
        assert cache.get(make_key(inputs[1])) is None

    def test_kosongkan(self, cache, calculate):
        calculate(make_input({"son": 1}))
        cache.clear()
        assert len(cache) == 0
        assert cache.stats()["misses"] == 0

    def test_ukuran_tidak_sah(self):
        with pytest.raises(ValueError):
            CalculationCache(max_size=0)

    def test_aman_untuk_banyak_thread(self, cache, calculate):
        inputs = [
            make_input({"husband": 1, "son": 1}),
            make_input({"wife": 1, "mother": 1, "full_sister": 2}),
            make_input({"daughter": 1}),
            make_input({"mother": 1, "uncle_paternal": 6}),
            make_input({"grandfather": 1, "full_brother": 1, "full_sister": 1}),
        ]
        expected = [calculate_inheritance(data) for data in inputs]

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(calculate, inputs * 20))

        for i, result in enumerate(results):
            want = expected[i % len(inputs)]
            assert [(s.heir, s.fraction) for s in result.shares] == [(s.heir, s.fraction) for s in want.shares]
        assert len(cache) <= 3
        stats = cache.stats()
        assert stats["hits"] + stats["misses"] == 100
