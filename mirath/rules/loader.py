import json
from pathlib import Path
from typing import Any, Dict, Union

from schemas import Madhab, MadhhabRuleSet

DATA_DIR = Path(__file__).parent / "data"


def load_json(path: Union[str, Path]) -> Dict[str, Any]:
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_rule_set(madhab: Madhab, data_dir: Union[str, Path] = DATA_DIR) -> MadhhabRuleSet:
    """Baca file aturan satu madzhab (mis. data/shafii.json) lalu validasi ke MadhhabRuleSet."""
    raw = load_json(Path(data_dir) / f"{madhab.value}.json")
    return MadhhabRuleSet.model_validate(raw)
