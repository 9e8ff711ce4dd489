# mirath/math/inkisar.py

from math import gcd, lcm
from typing import List, Tuple

from mirath.math.ashl import bandingkan
from schemas import ComparisonItem


def _single_group_factor(ruus: int, saham_kelompok: int) -> Tuple[int, str]:
    """
    Pengali untuk satu golongan yang sahamnya tidak habis dibagi jumlah kepala.

    Bila saham sudah kelipatan ruus, pengali 1. Selain itu pengali adalah
    ruus / FPB(ruus, saham); untuk mubayanah FPB = 1 sehingga pengali = ruus,
    untuk muwafaqoh cukup wafq-nya saja.
    """
    rel = bandingkan(ruus, saham_kelompok).relation
    if saham_kelompok % ruus == 0:
        return 1, rel
    return ruus // gcd(ruus, saham_kelompok), rel


def compute_inkisar_multiplier(
    groups: List[Tuple[str, int, int]]
) -> Tuple[int, List[ComparisonItem], List[str]]:
    """
    groups: (nama golongan, ruus, saham golongan) dengan saham > 0.
    Return: (pengali tashih, perbandingan tiap golongan yang pecah, catatan).

    Pengali antar golongan digabung dengan KPK: mumatsalah cukup satu,
    mudakholah diambil yang besar, muwafaqoh & mubayanah dikalikan.
    """
    notes: List[str] = []
    comps: List[ComparisonItem] = []
    multiplier = 1

    for nama, ruus, saham_k in groups:
        factor, rel = _single_group_factor(ruus, saham_k)
        if factor == 1:
            continue
        comps.append(ComparisonItem(a=ruus, b=saham_k, relation=rel))
        notes.append(f"{nama}: {saham_k} saham untuk {ruus} orang ({rel}), pengali {factor}.")
        multiplier = lcm(multiplier, factor)

    if multiplier > 1:
        notes.append(f"Tashīḥ: AM dan seluruh saham dikalikan {multiplier}.")
    return multiplier, comps, notes
