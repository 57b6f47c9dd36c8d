# primecee/utils/parse_utils.py
from __future__ import annotations

import math
import re
import unicodedata
from decimal import Decimal
from typing import Any, Dict, Iterable, Mapping, Optional

_WHITESPACE_RE = re.compile(r"\s+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
_SLUG_SEPARATORS_RE = re.compile(r"[-\s]+")


def is_record(value: Any) -> bool:
    return isinstance(value, Mapping)


def clean_str(v: Any) -> Optional[str]:
    if v is None:
        return None
    s = str(v).replace("\n", " ").strip()
    return s if s != "" else None


def normalize_key(value: Any) -> str:
    """
    Ключ для порівняння: trim + lower.

    None / не-рядок / порожній рядок → "" (це sentinel "нічого не збігається").
    """
    if not isinstance(value, str):
        return ""
    return value.strip().lower()


def strip_diacritics(value: str) -> str:
    """'Surface isolée' -> 'Surface isolee', 'œ' -> 'oe'."""
    decomposed = unicodedata.normalize("NFD", value)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.replace("œ", "oe").replace("æ", "ae")


def normalize_for_comparison(value: Any) -> str:
    """
    Жорсткіша нормалізація для назв/лейблів полів схеми:
    без діакритики, lower-case, все не-алфанумеричне → один пробіл.

    "Surface isolée (m²)" -> "surface isolee m"
    """
    key = normalize_key(value)
    if not key:
        return ""
    return _NON_ALNUM_RE.sub(" ", strip_diacritics(key)).strip()


def slugify_key(value: Any) -> str:
    """'Nombre Led' -> 'nombre_led', 'Éclairage' -> 'eclairage'."""
    if not isinstance(value, str):
        return ""
    return _SLUG_SEPARATORS_RE.sub("_", strip_diacritics(value).strip()).lower()


def to_number(v: Any) -> Optional[float]:
    """
    Безпечний парсинг числа. Ніколи не кидає виключення.

    - int/float/Decimal проходять як є, якщо скінченні (bool не рахується числом);
    - рядки: прибираємо всі пробіли (роздільники тисяч "1 234,5"),
      десяткову кому міняємо на крапку;
    - все інше, NaN, ±inf → None.
    """
    if isinstance(v, bool):
        return None

    if isinstance(v, (int, float, Decimal)):
        try:
            number = float(v)
        except (OverflowError, ValueError):
            return None
        return number if math.isfinite(number) else None

    if isinstance(v, str):
        s = _WHITESPACE_RE.sub("", v)
        if s == "" or "_" in s:
            return None
        s = s.replace(",", ".", 1)
        try:
            number = float(s)
        except ValueError:
            return None
        return number if math.isfinite(number) else None

    return None


def to_positive_number(v: Any) -> Optional[float]:
    number = to_number(v)
    if number is None or number <= 0:
        return None
    return number


def to_non_negative_number(v: Any) -> Optional[float]:
    number = to_number(v)
    if number is None or number < 0:
        return None
    return number


def compact_key(value: Any) -> str:
    """'LED_WATT' / 'led watt' / 'ledWatt' -> 'ledwatt'."""
    if not isinstance(value, str):
        return ""
    return re.sub(r"[\s_-]+", "", strip_diacritics(value)).lower()


def first_positive_param(params: Optional[Mapping[str, Any]], keys: Iterable[str]) -> Optional[float]:
    """
    Перше додатне число з params за списком ключів.

    Ключі порівнюються без регістру, пробілів, "_" і "-".
    """
    if not is_record(params):
        return None

    by_compact: Dict[str, Any] = {}
    for raw_key, raw_value in params.items():
        compact = compact_key(raw_key)
        if compact and compact not in by_compact:
            by_compact[compact] = raw_value

    for key in keys:
        compact = compact_key(key)
        if compact in by_compact:
            value = to_positive_number(by_compact[compact])
            if value is not None:
                return value
    return None
