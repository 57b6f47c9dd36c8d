"""
Нормалізація сирих записів бекенду (JSON / YAML) у доменні моделі.

Бекенд віддає "м'які" дані: camelCase і snake_case впереміш, legacy-форма
cee_config ({"defaults": {"multiplier": {...}}}), числа рядками з комою.
Тут все це зводиться до frozen dataclass'ів з primecee.domain.models.

Погані поля не валять запис, вони просто стають None / дефолтом.
ValueError кидається тільки коли немає ідентифікатора запису.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from primecee.domain.constants import (
    DEFAULT_CEE_CATEGORY,
    LEGACY_QUANTITY_KEY,
    CeeCategory,
    get_category_default_multiplier_key,
    resolve_multiplier_key_for_category,
)
from primecee.domain.formula_templates import (
    STANDARD_TEMPLATE_ID,
    get_formula_template,
)
from primecee.domain.models import (
    CatalogProduct,
    CeeConfig,
    Delegate,
    KwhCumacEntry,
    OrganizationPrimeSettings,
    ParamsSchema,
    Project,
    ProjectProductLine,
    SchemaField,
    ValorisationFormulaConfig,
)
from primecee.utils.parse_utils import (
    clean_str,
    is_record,
    slugify_key,
    to_number,
    to_positive_number,
)

logger = logging.getLogger(__name__)

# Синоніми "кількість LED" → канонічний ключ формули.
LED_COUNT_SYNONYMS = {
    "nombre_led",
    "nombre_luminaire",
    "nombre_leds",
    "nombre_de_led",
    "nombre_de_luminaire",
}
LED_COUNT_KEY = "nombre_luminaire"

LED_COUNT_VALUE_KEYS = (
    "variableValue",
    "variable_value",
    "nombre_led",
    "nombreLed",
    "Nombre Led",
    "nombre_luminaire",
    "nombreLuminaire",
)

FORMULA_CANDIDATE_KEYS = ("valorisation_formula", "valorisationFormula", "valorisation")


def _first_present(raw: Mapping[str, Any], *keys: str) -> Any:
    """Значення першого ключа, який є в raw і не None (camelCase / snake_case)."""
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _first_string(raw: Mapping[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = raw.get(key)
        if isinstance(value, str):
            return value
    return None


def _as_dict(value: Any) -> Dict[str, Any]:
    return dict(value) if is_record(value) else {}


# ---------------------------------------------------------------------------
# params_schema
# ---------------------------------------------------------------------------

def parse_params_schema(raw: Any) -> ParamsSchema:
    """
    params_schema: або список полів, або {"fields": [...]}.

    Поля без рядкового name відкидаються.
    """
    if is_record(raw):
        raw = raw.get("fields")

    if not isinstance(raw, (list, tuple)):
        return ParamsSchema()

    fields: List[SchemaField] = []
    for item in raw:
        if not is_record(item):
            continue
        name = item.get("name")
        if not isinstance(name, str):
            continue
        label = item.get("label")
        unit = item.get("unit")
        fields.append(
            SchemaField(
                name=name,
                label=label if isinstance(label, str) else None,
                unit=unit if isinstance(unit, str) else None,
            )
        )

    return ParamsSchema(fields=tuple(fields))


# ---------------------------------------------------------------------------
# cee_config
# ---------------------------------------------------------------------------

def _parse_category(raw: Mapping[str, Any]) -> CeeCategory:
    value = _first_string(raw, "category", "category_key")
    try:
        return CeeCategory((value or "").strip())
    except ValueError:
        return DEFAULT_CEE_CATEGORY


def parse_cee_config(raw: Any) -> CeeConfig:
    """
    Нормалізує cee_config продукту.

    - категорія з відомого списку, інакше isolation;
    - шаблон формули з відомого списку, інакше standard;
      вираз: для custom trim користувацького тексту, інакше вираз шаблону;
    - ключ множника санітизується ("quantity" → дефолт категорії / legacy),
      відсутній ключ → дефолт категорії або legacy "__quantity__";
    - коефіцієнт і LED watt тільки додатні; LED watt тільки для lighting.
    """
    if not is_record(raw):
        return CeeConfig(prime_multiplier_param=_default_multiplier_key(DEFAULT_CEE_CATEGORY))

    legacy_defaults = _as_dict(raw.get("defaults"))
    legacy_multiplier = _as_dict(legacy_defaults.get("multiplier"))

    category = _parse_category(raw)

    template = get_formula_template(_first_string(raw, "formulaTemplate", "formula_template"))
    if template is None:
        template = get_formula_template(STANDARD_TEMPLATE_ID)

    if template.is_custom:
        raw_expression = _first_string(raw, "formulaExpression", "formula_expression")
        expression = clean_str(raw_expression) if raw_expression else None
    else:
        expression = template.expression

    multiplier_param = (
        resolve_multiplier_key_for_category(
            _first_present(raw, "primeMultiplierParam", "prime_multiplier_param"),
            category.value,
        )
        or resolve_multiplier_key_for_category(legacy_multiplier.get("key"), category.value)
        or _default_multiplier_key(category)
    )

    raw_coefficient = _first_present(raw, "primeMultiplierCoefficient", "prime_multiplier_coefficient")
    if raw_coefficient is None:
        raw_coefficient = legacy_multiplier.get("coefficient")
    coefficient = to_positive_number(raw_coefficient)

    led_watt = to_positive_number(_first_present(raw, "ledWattConstant", "led_watt_constant")) or to_positive_number(
        legacy_defaults.get("led_watt_constant")
    )

    return CeeConfig(
        category=category,
        formula_template=template.id,
        formula_expression=expression,
        prime_multiplier_param=multiplier_param,
        prime_multiplier_coefficient=coefficient,
        led_watt_constant=led_watt if category is CeeCategory.LIGHTING else None,
    )


def _default_multiplier_key(category: CeeCategory) -> str:
    return get_category_default_multiplier_key(category.value) or LEGACY_QUANTITY_KEY


# ---------------------------------------------------------------------------
# ValorisationFormulaConfig
# ---------------------------------------------------------------------------

def parse_valorisation_formula(raw: Any) -> Optional[ValorisationFormulaConfig]:
    """
    {"variableKey", "variableLabel", "coefficient", "variableValue"} → конфіг.

    Порожній variableKey → None. Синоніми кількості LED зводяться до
    "nombre_luminaire"; для нього literal шукається в кількох ключах
    і за замовчуванням дорівнює 0.
    """
    if not is_record(raw):
        return None

    raw_key = raw.get("variableKey")
    raw_key = raw_key.strip() if isinstance(raw_key, str) else ""
    if not raw_key:
        return None

    variable_key = LED_COUNT_KEY if slugify_key(raw_key) in LED_COUNT_SYNONYMS else raw_key

    raw_label = raw.get("variableLabel")
    label = raw_label if isinstance(raw_label, str) and raw_label.strip() else None

    raw_coefficient = raw.get("coefficient")
    coefficient = (
        to_positive_number(raw_coefficient)
        if isinstance(raw_coefficient, (int, float)) and not isinstance(raw_coefficient, bool)
        else None
    )

    variable_value: Optional[float] = None
    if variable_key == LED_COUNT_KEY:
        for key in LED_COUNT_VALUE_KEYS:
            candidate = to_positive_number(raw.get(key))
            if candidate is not None:
                variable_value = candidate
                break
        if variable_value is None:
            variable_value = 0.0
    elif raw.get("variableValue") is not None:
        variable_value = to_positive_number(raw.get("variableValue"))

    return ValorisationFormulaConfig(
        variable_key=variable_key,
        variable_label=label,
        coefficient=coefficient,
        variable_value=variable_value,
    )


def find_product_valorisation_formula(
    default_params: Any,
    raw_cee_config: Any,
) -> Optional[ValorisationFormulaConfig]:
    """Перший кандидат, що нормалізується: default_params, потім cee_config.defaults."""
    sources = [_as_dict(default_params)]
    if is_record(raw_cee_config):
        sources.append(_as_dict(raw_cee_config.get("defaults")))

    for source in sources:
        for key in FORMULA_CANDIDATE_KEYS:
            formula = parse_valorisation_formula(source.get(key))
            if formula is not None:
                return formula
    return None


# ---------------------------------------------------------------------------
# kWh cumac
# ---------------------------------------------------------------------------

def parse_kwh_cumac_entries(raw: Any) -> Tuple[KwhCumacEntry, ...]:
    if not isinstance(raw, (list, tuple)):
        return ()

    entries: List[KwhCumacEntry] = []
    for item in raw:
        if not is_record(item):
            continue
        entries.append(
            KwhCumacEntry(
                building_type=clean_str(item.get("building_type")),
                kwh_cumac=to_number(item.get("kwh_cumac")),
                kwh_cumac_lt_400=to_number(item.get("kwh_cumac_lt_400")),
                kwh_cumac_gte_400=to_number(item.get("kwh_cumac_gte_400")),
            )
        )
    return tuple(entries)


# ---------------------------------------------------------------------------
# Записи верхнього рівня
# ---------------------------------------------------------------------------

def parse_product_row(raw: Mapping[str, Any]) -> CatalogProduct:
    product_id = clean_str(raw.get("id"))
    if not product_id:
        raise ValueError("product id is required")

    raw_cee_config = raw.get("cee_config")
    default_params = _as_dict(raw.get("default_params"))
    code = clean_str(raw.get("code"))

    return CatalogProduct(
        id=product_id,
        code=code.upper() if code else None,
        name=clean_str(raw.get("name")),
        category=clean_str(raw.get("category")),
        params_schema=parse_params_schema(raw.get("params_schema")),
        default_params=default_params,
        cee_config=parse_cee_config(raw_cee_config),
        kwh_cumac_values=parse_kwh_cumac_entries(raw.get("kwh_cumac_values")),
        valorisation_formula=find_product_valorisation_formula(default_params, raw_cee_config),
    )


def parse_products(rows: Iterable[Any]) -> Dict[str, CatalogProduct]:
    products: Dict[str, CatalogProduct] = {}
    for row in rows:
        if not is_record(row):
            continue
        try:
            product = parse_product_row(row)
        except ValueError as exc:
            logger.warning("[CATALOG] Пропущено продукт через помилку: %s", exc)
            continue
        products[product.id] = product
    return products


def parse_delegate(raw: Any) -> Optional[Delegate]:
    if not is_record(raw):
        return None
    return Delegate(
        price_eur_per_mwh=to_number(raw.get("price_eur_per_mwh")),
        name=clean_str(raw.get("name")),
    )


def parse_organization_settings(raw: Any) -> OrganizationPrimeSettings:
    if not is_record(raw):
        return OrganizationPrimeSettings()
    return OrganizationPrimeSettings(
        bonification=to_number(_first_present(raw, "prime_bonification", "bonification"))
    )


def parse_project_line(raw: Mapping[str, Any], products: Mapping[str, CatalogProduct]) -> ProjectProductLine:
    product_id = clean_str(raw.get("product_id"))
    product = products.get(product_id) if product_id else None
    if product_id and product is None:
        logger.warning("[CATALOG] Невідомий product_id=%r у рядку проєкту", product_id)

    return ProjectProductLine(
        id=clean_str(raw.get("id")),
        product_id=product_id,
        quantity=raw.get("quantity"),
        dynamic_params=_as_dict(raw.get("dynamic_params")),
        product=product,
    )


def parse_project_row(
    raw: Mapping[str, Any],
    products: Mapping[str, CatalogProduct],
    delegate: Optional[Delegate] = None,
) -> Project:
    raw_lines = raw.get("products") or raw.get("project_products") or []
    if not isinstance(raw_lines, (list, tuple)):
        raw_lines = []

    lines = tuple(parse_project_line(item, products) for item in raw_lines if is_record(item))

    return Project(
        id=clean_str(raw.get("id")),
        building_type=clean_str(raw.get("building_type")),
        building_surface=to_number(raw.get("building_surface")),
        lines=lines,
        delegate=delegate if delegate is not None else parse_delegate(raw.get("delegate")),
    )
