# primecee/domain/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from primecee.domain.constants import DEFAULT_CEE_CATEGORY, CeeCategory


# ---------------------------------------------------------------------------
# Каталог
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SchemaField:
    name: str
    label: Optional[str] = None
    unit: Optional[str] = None


@dataclass(frozen=True)
class ParamsSchema:
    """
    Впорядкований список полів продукту.

    Використовується тільки для пошуку лейблів і матчингу ключів
    dynamic_params, ніякої валідації тут немає.
    """
    fields: Tuple[SchemaField, ...] = ()


@dataclass(frozen=True)
class CeeConfig:
    category: CeeCategory = DEFAULT_CEE_CATEGORY
    formula_template: str = "standard"
    formula_expression: Optional[str] = None
    prime_multiplier_param: Optional[str] = None
    prime_multiplier_coefficient: Optional[float] = None
    led_watt_constant: Optional[float] = None


@dataclass(frozen=True)
class ValorisationFormulaConfig:
    variable_key: str
    variable_label: Optional[str] = None
    coefficient: Optional[float] = None
    variable_value: Optional[float] = None


@dataclass(frozen=True)
class KwhCumacEntry:
    building_type: Optional[str]
    kwh_cumac: Optional[float] = None
    kwh_cumac_lt_400: Optional[float] = None       # освітлення, будівля < 400 m²
    kwh_cumac_gte_400: Optional[float] = None      # освітлення, будівля >= 400 m²


@dataclass(frozen=True)
class CatalogProduct:
    id: str
    code: Optional[str] = None
    name: Optional[str] = None
    category: Optional[str] = None
    params_schema: ParamsSchema = field(default_factory=ParamsSchema)
    default_params: Dict[str, Any] = field(default_factory=dict)
    cee_config: CeeConfig = field(default_factory=CeeConfig)
    kwh_cumac_values: Tuple[KwhCumacEntry, ...] = ()
    valorisation_formula: Optional[ValorisationFormulaConfig] = None


# ---------------------------------------------------------------------------
# Проєкт / контрагенти
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProjectProductLine:
    id: Optional[str] = None
    product_id: Optional[str] = None
    quantity: Any = None                       # як ввів користувач (число або рядок)
    dynamic_params: Dict[str, Any] = field(default_factory=dict)
    product: Optional[CatalogProduct] = None


@dataclass(frozen=True)
class Delegate:
    price_eur_per_mwh: Optional[float] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class OrganizationPrimeSettings:
    bonification: Optional[float] = None


@dataclass(frozen=True)
class Project:
    id: Optional[str] = None
    building_type: Optional[str] = None
    building_surface: Optional[float] = None   # m², для тарифів освітлення < / >= 400
    lines: Tuple[ProjectProductLine, ...] = ()
    delegate: Optional[Delegate] = None


# ---------------------------------------------------------------------------
# Вхід калькулятора
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CeeOverrides:
    """Явні перевизначення; кожне поле має пріоритет над звичайним входом."""
    kwh_cumac: Optional[float] = None
    bonification: Optional[float] = None
    coefficient: Optional[float] = None
    multiplier: Optional[float] = None
    delegate_price_eur_per_mwh: Optional[float] = None
    valorisation_tarif: Optional[float] = None
    led_watt: Optional[float] = None
    mwh_divisor: Optional[float] = None


@dataclass(frozen=True)
class CeeCalculationInput:
    kwh_cumac: Optional[float]
    multiplier: Optional[float]
    bonification: Optional[float] = None
    coefficient: Optional[float] = None
    quantity: Any = None
    delegate_price_eur_per_mwh: Optional[float] = None
    dynamic_params: Dict[str, Any] = field(default_factory=dict)
    formula_expression: Optional[str] = None
    overrides: CeeOverrides = field(default_factory=CeeOverrides)

    # Освітлення
    category: Optional[str] = None
    lighting_base_kwh: Optional[float] = None        # None → missing_base
    default_led_watt: Optional[float] = None         # дефолт категорії з конфігу


# ---------------------------------------------------------------------------
# Результати (ефемерні, завжди перераховуються)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MultiplierResolution:
    value: Optional[float]
    label: Optional[str]
    missing_dynamic_params: bool = False


@dataclass(frozen=True)
class LightingDetails:
    # None: потужність LED невідома, рахувати на LED нічого.
    per_led_mwh: Optional[float] = None
    per_led_eur: Optional[float] = None
    total_mwh: Optional[float] = None
    total_eur: Optional[float] = None
    missing_base: bool = False
    led_watt: Optional[float] = None
    base_kwh: Optional[float] = None


@dataclass(frozen=True)
class PrimeCeeResult:
    multiplier: float
    delegate_price: float
    valorisation_per_unit_mwh: float
    valorisation_per_unit_eur: float
    valorisation_total_mwh: float
    valorisation_total_eur: float
    total_prime: float
    lighting: Optional[LightingDetails] = None


@dataclass(frozen=True)
class LineValorisation:
    project_product_id: str
    product_code: Optional[str]
    product_name: Optional[str]
    product_category: Optional[str]
    multiplier_label: Optional[str]
    multiplier_value: Optional[float]
    result: Optional[PrimeCeeResult]
    missing_dynamic_params: bool
    missing_kwh: bool


@dataclass(frozen=True)
class ProjectCeeTotals:
    total_valorisation_mwh: float = 0.0
    total_valorisation_eur: float = 0.0
    total_prime: float = 0.0


@dataclass(frozen=True)
class ProjectValorisation:
    entries: Tuple[LineValorisation, ...]
    totals: ProjectCeeTotals
