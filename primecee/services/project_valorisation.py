"""
Валоризація CEE для всього проєкту.

Чиста функція від знімка (проєкт + каталог + організація + делегат):
жодного стану, жодного I/O. Будь-яка зміна входу → просто викликати ще раз.

Кроки:
  1) відкидаємо службові продукти (код починається з "ECO"), один раз, тут;
  2) для кожного рядка: множник і kWh cumac незалежно;
  3) якщо обидва є → калькулятор;
  4) агрегація всіх результатів (None теж) у тотали.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from primecee.config.env import ValorisationConfig
from primecee.domain.aggregator import compute_project_cee_totals
from primecee.domain.constants import HELPER_CODE_PREFIX, is_lighting_category
from primecee.domain.kwh_cumac import lookup_kwh_cumac, lookup_lighting_base_kwh
from primecee.domain.models import (
    CatalogProduct,
    CeeCalculationInput,
    CeeOverrides,
    LineValorisation,
    OrganizationPrimeSettings,
    PrimeCeeResult,
    Project,
    ProjectProductLine,
    ProjectValorisation,
)
from primecee.domain.multiplier import resolve_multiplier
from primecee.domain.valorisation_calc import (
    compute_prime_cee,
    resolve_delegate_price,
    resolve_organization_bonification,
)
from primecee.utils.parse_utils import clean_str, to_number, to_positive_number

logger = logging.getLogger(__name__)


def is_helper_product(product: Optional[CatalogProduct]) -> bool:
    """Службові/edge продукти (код "ECO...") не показуються і не рахуються."""
    if product is None:
        return False
    return (product.code or "").strip().upper().startswith(HELPER_CODE_PREFIX)


def displayed_product_lines(lines: Iterable[ProjectProductLine]) -> Tuple[ProjectProductLine, ...]:
    return tuple(line for line in lines if not is_helper_product(line.product))


def _line_id(line: ProjectProductLine, index: int) -> str:
    return line.id or line.product_id or f"product-{index}"


def valorise_line(
    line: ProjectProductLine,
    *,
    index: int,
    building_type: str,
    building_surface: Optional[float],
    delegate_price: Optional[float],
    bonification: float,
    settings: ValorisationConfig,
) -> LineValorisation:
    product = line.product
    entry_id = _line_id(line, index)

    if product is None:
        logger.warning("[CEE] Рядок %s без продукту каталогу, пропускаю розрахунок", entry_id)
        return LineValorisation(
            project_product_id=entry_id,
            product_code=None,
            product_name=None,
            product_category=None,
            multiplier_label=None,
            multiplier_value=None,
            result=None,
            missing_dynamic_params=False,
            missing_kwh=not building_type,
        )

    multiplier = resolve_multiplier(product, line)
    kwh_cumac = lookup_kwh_cumac(product.kwh_cumac_values, building_type)
    missing_kwh = not building_type or kwh_cumac is None

    result: Optional[PrimeCeeResult] = None
    if not missing_kwh and multiplier.value is not None and multiplier.value > 0:
        cee = product.cee_config
        category = product.category
        lighting_base = None
        if is_lighting_category(category):
            lighting_base = lookup_lighting_base_kwh(product.kwh_cumac_values, building_type, building_surface)

        result = compute_prime_cee(
            CeeCalculationInput(
                kwh_cumac=kwh_cumac,
                multiplier=multiplier.value,
                bonification=bonification,
                coefficient=1.0,
                quantity=to_number(line.quantity),
                delegate_price_eur_per_mwh=delegate_price,
                dynamic_params=dict(line.dynamic_params or {}),
                formula_expression=clean_str(cee.formula_expression),
                overrides=CeeOverrides(led_watt=to_positive_number(cee.led_watt_constant)),
                category=category,
                lighting_base_kwh=lighting_base,
                default_led_watt=settings.lighting_default_led_watt,
            )
        )
    elif multiplier.missing_dynamic_params:
        logger.info(
            "[CEE] %s (%s): параметри динаміки відсутні для %r",
            entry_id,
            product.code,
            multiplier.label,
        )
    elif missing_kwh:
        logger.info(
            "[CEE] %s (%s): немає kWh cumac для building_type=%r",
            entry_id,
            product.code,
            building_type,
        )

    return LineValorisation(
        project_product_id=entry_id,
        product_code=product.code,
        product_name=product.name,
        product_category=product.category,
        multiplier_label=multiplier.label,
        multiplier_value=multiplier.value,
        result=result,
        missing_dynamic_params=multiplier.missing_dynamic_params,
        missing_kwh=missing_kwh,
    )


def valorise_project(
    project: Project,
    organization: Optional[OrganizationPrimeSettings] = None,
    settings: Optional[ValorisationConfig] = None,
) -> ProjectValorisation:
    """
    Єдина публічна точка входу: всі рядки проєкту (без "ECO") + тотали.

    settings не передано → вбудовані дефолти (бонифікація 2, без дефолтної
    потужності LED), щоб функція лишалась чистою і не читала оточення.
    """
    settings = settings or ValorisationConfig()

    building_type = (project.building_type or "").strip()
    delegate_price = resolve_delegate_price(project.delegate)
    bonification = resolve_organization_bonification(organization, settings.default_bonification)

    lines = displayed_product_lines(project.lines)

    entries: List[LineValorisation] = [
        valorise_line(
            line,
            index=index,
            building_type=building_type,
            building_surface=project.building_surface,
            delegate_price=delegate_price,
            bonification=bonification,
            settings=settings,
        )
        for index, line in enumerate(lines)
    ]

    totals = compute_project_cee_totals(entry.result for entry in entries)

    logger.debug(
        "[CEE] Проєкт %s: рядків=%d, prime=%.2f, MWh=%.4f",
        project.id,
        len(entries),
        totals.total_prime,
        totals.total_valorisation_mwh,
    )

    return ProjectValorisation(entries=tuple(entries), totals=totals)
