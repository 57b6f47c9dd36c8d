# primecee/domain/valorisation_calc.py

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Optional

from primecee.domain.constants import (
    DEFAULT_BONIFICATION,
    DEFAULT_COEFFICIENT,
    MWH_DIVISOR,
    is_lighting_category,
)
from primecee.domain.formula_templates import evaluate_formula_expression
from primecee.domain.models import (
    CeeCalculationInput,
    Delegate,
    LightingDetails,
    OrganizationPrimeSettings,
    PrimeCeeResult,
)
from primecee.utils.parse_utils import (
    first_positive_param,
    to_non_negative_number,
    to_positive_number,
)

logger = logging.getLogger(__name__)

WATTS_PER_KW = 1000.0

LED_WATT_KEYS = ("led_watt", "ledWatt", "LED_WATT")
BONUS_DOM_KEYS = ("bonus_dom", "bonusDom", "BONUS_DOM")
DYNAMIC_QUANTITY_KEYS = ("quantity", "quantite", "Quantité", "QUANTITY")


# ---------------------------------------------------------------------------
# Резолвери входів
# ---------------------------------------------------------------------------

def resolve_bonification(value: Any, default: float = DEFAULT_BONIFICATION) -> float:
    """Бонифікація організації; не задана або <= 0 → default (2)."""
    resolved = to_positive_number(value)
    if resolved is not None:
        return resolved
    return to_positive_number(default) or DEFAULT_BONIFICATION


def resolve_organization_bonification(
    settings: Optional[OrganizationPrimeSettings],
    default: float = DEFAULT_BONIFICATION,
) -> float:
    return resolve_bonification(settings.bonification if settings else None, default)


def resolve_delegate_price(delegate: Optional[Delegate]) -> Optional[float]:
    """Тариф делегата €/MWh або None, якщо не налаштований."""
    if delegate is None:
        return None
    return to_non_negative_number(delegate.price_eur_per_mwh)


def _resolve_kwh(inp: CeeCalculationInput) -> Optional[float]:
    return to_positive_number(inp.overrides.kwh_cumac) or to_positive_number(inp.kwh_cumac)


def _resolve_bonification(inp: CeeCalculationInput) -> float:
    return (
        to_positive_number(inp.overrides.bonification)
        or to_positive_number(inp.bonification)
        or DEFAULT_BONIFICATION
    )


def _resolve_coefficient(inp: CeeCalculationInput) -> float:
    return (
        to_positive_number(inp.overrides.coefficient)
        or to_positive_number(inp.coefficient)
        or DEFAULT_COEFFICIENT
    )


def _resolve_multiplier(inp: CeeCalculationInput) -> Optional[float]:
    return (
        to_positive_number(inp.overrides.multiplier)
        or to_positive_number(inp.multiplier)
        or to_positive_number(inp.quantity)
        or first_positive_param(inp.dynamic_params, DYNAMIC_QUANTITY_KEYS)
    )


def _resolve_divisor(inp: CeeCalculationInput) -> float:
    return to_positive_number(inp.overrides.mwh_divisor) or MWH_DIVISOR


def _resolve_price(inp: CeeCalculationInput) -> float:
    """Тариф €/MWh; не налаштований → 0 (енергетичні цифри все одно валідні)."""
    for candidate in (
        inp.overrides.valorisation_tarif,
        inp.overrides.delegate_price_eur_per_mwh,
        inp.delegate_price_eur_per_mwh,
    ):
        price = to_non_negative_number(candidate)
        if price is not None:
            return price
    return 0.0


def _resolve_led_watt(inp: CeeCalculationInput) -> Optional[float]:
    """ledWattConstant продукту → led_watt з dynamic_params → дефолт категорії з конфігу."""
    return (
        to_positive_number(inp.overrides.led_watt)
        or first_positive_param(inp.dynamic_params, LED_WATT_KEYS)
        or to_positive_number(inp.default_led_watt)
    )


def _finite_or_zero(value: float) -> float:
    return value if math.isfinite(value) else 0.0


# ---------------------------------------------------------------------------
# Освітлення
# ---------------------------------------------------------------------------

def compute_lighting_details(
    *,
    base_kwh: Optional[float],
    bonification: float,
    coefficient: float,
    multiplier: float,
    delegate_price: float,
    led_watt: Optional[float],
) -> LightingDetails:
    """
    Цифри "на одну LED" для категорії lighting.

      per_led_mwh = base × bonification × coefficient × (led_watt / 1000) / 1000
      per_led_eur = per_led_mwh × тариф
      total_*     = per_led_* × кількість LED (множник)

    Немає бази kWh cumac для типології → missing_base=True і всі цифри 0
    (на екрані це іконка-попередження, а не тихий fallback), з потужністю
    чи без неї. База є, а потужності немає → цифри None.
    """
    base = to_positive_number(base_kwh)
    watt = to_positive_number(led_watt)

    if base is None:
        logger.warning("[CEE-LIGHTING] Немає бази kWh cumac для типології, missing_base")
        return LightingDetails(
            per_led_mwh=0.0,
            per_led_eur=0.0,
            total_mwh=0.0,
            total_eur=0.0,
            missing_base=True,
            led_watt=watt,
            base_kwh=None,
        )

    if watt is None:
        logger.debug("[CEE-LIGHTING] Немає потужності LED, цифри на LED не рахуються")
        return LightingDetails(missing_base=False, base_kwh=base)

    per_led_mwh = _finite_or_zero(base * bonification * coefficient * (watt / WATTS_PER_KW) / MWH_DIVISOR)
    per_led_eur = per_led_mwh * delegate_price

    return LightingDetails(
        per_led_mwh=per_led_mwh,
        per_led_eur=per_led_eur,
        total_mwh=per_led_mwh * multiplier,
        total_eur=per_led_eur * multiplier,
        missing_base=False,
        led_watt=watt,
        base_kwh=base,
    )


def _formula_variables(
    inp: CeeCalculationInput,
    *,
    kwh: float,
    bonification: float,
    coefficient: float,
    divisor: float,
    led_watt: Optional[float],
) -> Dict[str, float]:
    variables = {
        "KWH_CUMAC": kwh,
        "BONIFICATION": bonification,
        "COEFFICIENT": coefficient,
        "MWH_DIVISOR": divisor,
        "LED_WATT": led_watt or 1.0,
    }
    # BONUS_DOM тільки з параметрів рядка; без нього формула не рахується.
    bonus_dom = first_positive_param(inp.dynamic_params, BONUS_DOM_KEYS)
    if bonus_dom is not None:
        variables["BONUS_DOM"] = bonus_dom
    return variables


# ---------------------------------------------------------------------------
# Основний розрахунок
# ---------------------------------------------------------------------------

def compute_prime_cee(inp: CeeCalculationInput) -> Optional[PrimeCeeResult]:
    """
    Валоризація одного рядка проєкту.

    Загальна формула:
      per_unit_mwh = kwh_cumac × bonification × coefficient / 1000
      total_mwh    = per_unit_mwh × multiplier
      per_unit_eur = per_unit_mwh × тариф делегата (0 без тарифу)
      total_eur    = total_mwh × тариф
      total_prime  = total_eur

    Якщо є formula_expression і вона рахується, per_unit_mwh береться з неї.
    Для lighting завжди додається під-результат `lighting`, і total_prime
    бере lighting.total_eur, якщо він порахований.

    None: тільки якщо немає додатних kwh_cumac або множника
    (виклик поза умовою входу).
    """
    kwh = _resolve_kwh(inp)
    multiplier = _resolve_multiplier(inp)
    if kwh is None or multiplier is None:
        logger.debug("[CEE] Пропускаю розрахунок: kwh_cumac=%r, multiplier=%r", kwh, multiplier)
        return None

    bonification = _resolve_bonification(inp)
    coefficient = _resolve_coefficient(inp)
    divisor = _resolve_divisor(inp)
    price = _resolve_price(inp)
    led_watt = _resolve_led_watt(inp)

    per_unit_mwh = kwh * bonification * coefficient / divisor

    if inp.formula_expression:
        evaluated = evaluate_formula_expression(
            inp.formula_expression,
            _formula_variables(
                inp,
                kwh=kwh,
                bonification=bonification,
                coefficient=coefficient,
                divisor=divisor,
                led_watt=led_watt,
            ),
        )
        if evaluated is not None:
            per_unit_mwh = evaluated

    per_unit_mwh = _finite_or_zero(per_unit_mwh)
    total_mwh = per_unit_mwh * multiplier
    per_unit_eur = per_unit_mwh * price
    total_eur = total_mwh * price
    total_prime = total_eur

    lighting: Optional[LightingDetails] = None
    if is_lighting_category(inp.category):
        lighting = compute_lighting_details(
            base_kwh=inp.lighting_base_kwh,
            bonification=bonification,
            coefficient=coefficient,
            multiplier=multiplier,
            delegate_price=price,
            led_watt=led_watt,
        )
        if lighting.total_eur is not None:
            total_prime = lighting.total_eur

    result = PrimeCeeResult(
        multiplier=multiplier,
        delegate_price=price,
        valorisation_per_unit_mwh=per_unit_mwh,
        valorisation_per_unit_eur=per_unit_eur,
        valorisation_total_mwh=total_mwh,
        valorisation_total_eur=total_eur,
        total_prime=total_prime,
        lighting=lighting,
    )

    logger.debug(
        "[CEE] kwh=%.2f, bonification=%.2f, coefficient=%.2f, multiplier=%.2f, "
        "per_unit_mwh=%.4f, total_mwh=%.4f, total_eur=%.2f, prime=%.2f",
        kwh,
        bonification,
        coefficient,
        multiplier,
        result.valorisation_per_unit_mwh,
        result.valorisation_total_mwh,
        result.valorisation_total_eur,
        result.total_prime,
    )

    return result
