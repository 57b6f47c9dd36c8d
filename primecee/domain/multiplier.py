# primecee/domain/multiplier.py

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional

from primecee.domain.constants import (
    DEFAULT_MULTIPLIER_LABEL,
    FORMULA_QUANTITY_KEY,
    LEGACY_QUANTITY_KEY,
    QUANTITY_LABEL,
    get_category_default_multiplier_key,
    get_category_default_multiplier_label,
    resolve_multiplier_key_for_category,
)
from primecee.domain.models import (
    CatalogProduct,
    MultiplierResolution,
    ParamsSchema,
    ProjectProductLine,
    ValorisationFormulaConfig,
)
from primecee.utils.parse_utils import (
    is_record,
    normalize_for_comparison,
    normalize_key,
    to_number,
    to_positive_number,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Схема / dynamic_params
# ---------------------------------------------------------------------------

def get_schema_field_label(schema: Optional[ParamsSchema], key: Optional[str]) -> Optional[str]:
    """
    Людський лейбл поля схеми за його name (порівняння trim + lower).

    Якщо label порожній → повертаємо сам name; якщо поля немає → None.
    """
    if schema is None:
        return None

    normalized = normalize_key(key)
    if not normalized:
        return None

    for schema_field in schema.fields:
        if normalize_key(schema_field.name) != normalized:
            continue
        if schema_field.label and schema_field.label.strip():
            return schema_field.label
        if schema_field.name.strip():
            return schema_field.name

    return None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def _matches_target(value: Optional[str], targets: List[str]) -> bool:
    normalized = normalize_for_comparison(value)
    if not normalized:
        return False
    return any(normalized == target or normalized.startswith(f"{target} ") for target in targets)


def find_dynamic_numeric_value(
    schema: Optional[ParamsSchema],
    dynamic_params: Optional[Mapping[str, Any]],
    targets: Iterable[Optional[str]],
) -> Optional[float]:
    """
    Шукає додатне число в dynamic_params рядка за списком цілей (ключ / лейбл).

    Порядок:
      1) поля схеми, для яких у dynamic_params є значення, порівнюємо
         і name, і label з кожною ціллю;
      2) якщо по схемі нічого, сирі ключі dynamic_params
         (продукти без params_schema).

    Ціль збігається, якщо нормалізоване значення == цілі або починається
    з "ціль " ("Surface isolée (m²)" ~ "surface isolée").
    """
    normalized_targets = [t for t in (normalize_for_comparison(x) for x in targets) if t]
    if not normalized_targets or not is_record(dynamic_params):
        return None

    fields = schema.fields if schema is not None else ()
    for schema_field in fields:
        raw = dynamic_params.get(schema_field.name)
        if _is_blank(raw):
            continue
        if _matches_target(schema_field.name, normalized_targets) or _matches_target(
            schema_field.label, normalized_targets
        ):
            value = to_positive_number(raw)
            if value is not None:
                return value

    for raw_key, raw in dynamic_params.items():
        if _is_blank(raw) or not isinstance(raw_key, str):
            continue
        if _matches_target(raw_key, normalized_targets):
            value = to_positive_number(raw)
            if value is not None:
                return value

    return None


# ---------------------------------------------------------------------------
# Лейбли
# ---------------------------------------------------------------------------

def format_coefficient(value: float) -> str:
    """2 -> '2', 1.5 -> '1.50', 2.0 -> '2'."""
    number = to_number(value)
    if number is None:
        return "1"
    if float(number).is_integer():
        return str(int(number))
    formatted = f"{number:.2f}"
    return formatted[:-3] if formatted.endswith(".00") else formatted


def format_label_with_coefficient(label: Optional[str], coefficient: Optional[float]) -> Optional[str]:
    """'Surface isolée' + 2 -> 'Surface isolée × 2'. Коефіцієнт 1 лейбл не змінює."""
    normalized = label.strip() if isinstance(label, str) and label.strip() else None
    number = to_number(coefficient)
    if number is None or number == 1:
        return normalized
    return f"{normalized or DEFAULT_MULTIPLIER_LABEL} × {format_coefficient(number)}"


# ---------------------------------------------------------------------------
# Резолвер множника
# ---------------------------------------------------------------------------

def resolve_effective_multiplier_key(product: CatalogProduct) -> Optional[str]:
    """
    Ефективний ключ множника для продукту.

    primeMultiplierParam, але якщо це legacy "quantity" і в категорії є
    дефолтне поле (isolation → surface_isolee, lighting → nombre_led),
    підставляємо дефолтне поле.
    """
    cee = product.cee_config
    cee_category = cee.category.value if cee.category is not None else product.category
    default_key = get_category_default_multiplier_key(cee_category) or get_category_default_multiplier_key(
        product.category
    )

    multiplier_param = resolve_multiplier_key_for_category(cee.prime_multiplier_param, cee_category)
    if multiplier_param == LEGACY_QUANTITY_KEY and default_key:
        return default_key
    return multiplier_param


def _resolve_from_schema(
    product: CatalogProduct,
    line: ProjectProductLine,
    effective_key: str,
) -> MultiplierResolution:
    schema_label = get_schema_field_label(product.params_schema, effective_key)
    if schema_label is None:
        category = product.cee_config.category.value
        if effective_key == get_category_default_multiplier_key(category):
            schema_label = get_category_default_multiplier_label(category)
    coefficient = to_positive_number(product.cee_config.prime_multiplier_coefficient) or 1.0
    label_base = schema_label or effective_key
    label = format_label_with_coefficient(label_base, coefficient) or label_base

    targets = [effective_key, schema_label] if schema_label else [effective_key]
    dynamic_value = find_dynamic_numeric_value(product.params_schema, line.dynamic_params, targets)

    if dynamic_value is not None:
        return MultiplierResolution(value=dynamic_value * coefficient, label=label)

    logger.debug(
        "[CEE] Продукт %r: немає додатного значення для %r в dynamic_params",
        product.code,
        effective_key,
    )
    return MultiplierResolution(value=None, label=label, missing_dynamic_params=True)


def _resolve_from_formula(
    product: CatalogProduct,
    line: ProjectProductLine,
    formula: ValorisationFormulaConfig,
) -> MultiplierResolution:
    coefficient = to_number(formula.coefficient)
    if coefficient is None or coefficient == 0:
        coefficient = 1.0

    if formula.variable_key == FORMULA_QUANTITY_KEY:
        quantity = to_positive_number(line.quantity)
        label = format_label_with_coefficient(formula.variable_label or QUANTITY_LABEL, coefficient)
        if quantity is not None:
            return MultiplierResolution(value=quantity * coefficient, label=label)
        return MultiplierResolution(value=None, label=label, missing_dynamic_params=True)

    label = format_label_with_coefficient(formula.variable_label or formula.variable_key, coefficient)
    targets = [formula.variable_key]
    if formula.variable_label:
        targets.append(formula.variable_label)

    dynamic_value = find_dynamic_numeric_value(product.params_schema, line.dynamic_params, targets)
    if dynamic_value is not None:
        return MultiplierResolution(value=dynamic_value * coefficient, label=label)

    literal = to_positive_number(formula.variable_value)
    if literal is not None:
        return MultiplierResolution(value=literal * coefficient, label=label)

    return MultiplierResolution(value=None, label=label, missing_dynamic_params=True)


def resolve_multiplier(product: CatalogProduct, line: ProjectProductLine) -> MultiplierResolution:
    """
    Визначає ОДНЕ число-множник для рядка проєкту.

    Порядок (перша гілка, що спрацювала, виграє):
      1) явне поле зі схеми (primeMultiplierParam / дефолт категорії);
         якщо значення немає, це missing_dynamic_params, а не помилка;
      2) ValorisationFormulaConfig продукту (тільки якщо 1) не дав
         реального поля, legacy "quantity" без дефолту категорії);
      3) голий quantity рядка з лейблом "Quantité".

    Порядок не міняти: від нього залежить, як рахуються старі записи каталогу.
    """
    effective_key = resolve_effective_multiplier_key(product)

    if effective_key and effective_key != LEGACY_QUANTITY_KEY:
        return _resolve_from_schema(product, line, effective_key)

    if product.valorisation_formula is not None:
        return _resolve_from_formula(product, line, product.valorisation_formula)

    quantity = to_positive_number(line.quantity)
    if quantity is not None:
        return MultiplierResolution(value=quantity, label=QUANTITY_LABEL)

    return MultiplierResolution(value=None, label=None, missing_dynamic_params=False)
