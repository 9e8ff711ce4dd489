# mirath/cache.py

"""
Cache hasil perhitungan (opsional), dibungkus di luar mesin sebagai decorator.

Hasil perhitungan immutable dan deterministik, jadi satu input yang sama
(setelah dinormalisasi) selalu boleh memakai hasil yang sama.
"""

import functools
import logging
import threading
from collections import OrderedDict
from typing import Callable, Dict, Hashable, Optional, Tuple

from schemas import CalculationInput, CalculationResult

logger = logging.getLogger(__name__)


def make_key(calculation_input: CalculationInput) -> Tuple[Hashable, ...]:
    """Kunci: madzhab + komponen harta + ahli waris (terurut), tanpa jumlah nol."""
    estate = calculation_input.estate
    heirs = tuple(sorted(
        (str(k).strip().lower(), c) for k, c in calculation_input.heirs.items() if c != 0
    ))
    return (
        calculation_input.madhab.strip().lower(),
        estate.total.normalize(),
        estate.funeral_costs.normalize(),
        estate.debts.normalize(),
        estate.bequest.normalize(),
        heirs,
    )


class CalculationCache:
    """Cache LRU berukuran tetap yang aman dipakai beberapa thread."""

    def __init__(self, max_size: int = 100):
        if max_size <= 0:
            raise ValueError("Ukuran cache harus positif")
        self.max_size = max_size
        self._entries: "OrderedDict[Tuple[Hashable, ...], CalculationResult]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: Tuple[Hashable, ...]) -> Optional[CalculationResult]:
        with self._lock:
            result = self._entries.get(key)
            if result is None:
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return result

    def put(self, key: Tuple[Hashable, ...], result: CalculationResult) -> None:
        with self._lock:
            self._entries[key] = result
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_size:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> Dict[str, float]:
        with self._lock:
            total = self.hits + self.misses
            return {
                "size": len(self._entries),
                "max_size": self.max_size,
                "hits": self.hits,
                "misses": self.misses,
                "hit_rate": self.hits / total if total else 0.0,
            }


def cached(cache: CalculationCache) -> Callable:
    """
    Decorator untuk calculate_inheritance. Pemanggilan dengan rule_set
    pengganti tidak memakai cache.
    """
    def decorator(func: Callable[..., CalculationResult]) -> Callable[..., CalculationResult]:
        @functools.wraps(func)
        def wrapper(calculation_input: CalculationInput, rule_set=None, **kwargs) -> CalculationResult:
            if rule_set is not None:
                return func(calculation_input, rule_set=rule_set, **kwargs)
            key = make_key(calculation_input)
            result = cache.get(key)
            if result is not None:
                logger.debug("Cache hit untuk %s", key[0])
                return result
            result = func(calculation_input, **kwargs)
            cache.put(key, result)
            return result

        wrapper.cache = cache
        return wrapper

    return decorator
