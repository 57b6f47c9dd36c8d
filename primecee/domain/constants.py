# primecee/domain/constants.py

from enum import Enum
from typing import Dict, Optional

from primecee.utils.parse_utils import slugify_key


class CeeCategory(Enum):
    """
    Категорія продукту з точки зору CEE.

    Від неї залежить дефолтне поле-множник (isolation → surface_isolee,
    lighting → nombre_led) і спецрозрахунок для освітлення.
    """
    ISOLATION = "isolation"
    HEATING = "heating"
    LIGHTING = "lighting"
    VENTILATION = "ventilation"
    OTHER = "other"


DEFAULT_CEE_CATEGORY = CeeCategory.ISOLATION

# Старі записи каталогу: "множник = просто quantity рядка".
LEGACY_QUANTITY_KEY = "__quantity__"

# ValorisationFormulaConfig.variableKey: "бери сирий quantity рядка".
FORMULA_QUANTITY_KEY = "__quantity__"

QUANTITY_LABEL = "Quantité"
DEFAULT_MULTIPLIER_LABEL = "Multiplicateur"

# Дефолтні поля-множники по категорії. "lighting" зводиться до "eclairage".
CATEGORY_MULTIPLIER_KEYS: Dict[str, str] = {
    "isolation": "surface_isolee",
    "eclairage": "nombre_led",
}

CATEGORY_MULTIPLIER_LABELS: Dict[str, str] = {
    "isolation": "Surface isolée",
    "eclairage": "Nombre de LED",
}

HELPER_CODE_PREFIX = "ECO"

DEFAULT_BONIFICATION = 2.0
DEFAULT_COEFFICIENT = 1.0
MWH_DIVISOR = 1000.0


def _normalize_category(category: Optional[str]) -> Optional[str]:
    slug = slugify_key(category)
    if not slug:
        return None
    if slug == CeeCategory.LIGHTING.value:
        return "eclairage"
    if slug in CATEGORY_MULTIPLIER_KEYS:
        return slug
    return None


def get_category_default_multiplier_key(category: Optional[str]) -> Optional[str]:
    normalized = _normalize_category(category)
    if normalized is None:
        return None
    return CATEGORY_MULTIPLIER_KEYS[normalized]


def get_category_default_multiplier_label(category: Optional[str]) -> Optional[str]:
    normalized = _normalize_category(category)
    if normalized is None:
        return None
    return CATEGORY_MULTIPLIER_LABELS.get(normalized)


def is_legacy_quantity_key(value: Optional[str]) -> bool:
    if not isinstance(value, str):
        return False
    trimmed = value.strip()
    if not trimmed:
        return False
    return trimmed == LEGACY_QUANTITY_KEY or trimmed.lower() == "quantity"


def resolve_multiplier_key_for_category(key: object, category: Optional[str]) -> Optional[str]:
    """
    Санітизація primeMultiplierParam.

    - не рядок / порожній → None;
    - "quantity" (будь-який регістр) або "__quantity__" → дефолтне поле
      категорії, якщо воно є, інакше LEGACY_QUANTITY_KEY;
    - інакше, ключ як є (trim).
    """
    if not isinstance(key, str):
        return None

    trimmed = key.strip()
    if not trimmed:
        return None

    if is_legacy_quantity_key(trimmed):
        return get_category_default_multiplier_key(category) or LEGACY_QUANTITY_KEY

    return trimmed


def is_lighting_category(category: Optional[str]) -> bool:
    return isinstance(category, str) and category.strip().lower() == CeeCategory.LIGHTING.value
