"""
Тексти для екрану "Valorisation après chantier" (fr-FR).

Округлення є тільки тут: домен віддає сирі float, а ми форматуємо
як Intl.NumberFormat("fr-FR"): "1 234,56 €", "0,5", "20".
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from primecee.domain.constants import is_lighting_category
from primecee.domain.models import LineValorisation, ProjectValorisation
from primecee.utils.parse_utils import to_number

NARROW_NBSP = "\u202f"   # роздільник тисяч у fr-FR
NBSP = "\u00a0"          # перед символом валюти

NOT_COMPUTED = "Non calculée"
PRIME_NOT_COMPUTED = "Prime non calculée"
MISSING_DYNAMIC_PARAMS = "Paramètres dynamiques manquants"
MISSING_KWH = "Aucune valeur kWh pour ce bâtiment"
LIGHTING_MISSING_BASE = "kWh cumac manquant pour cette typologie"
DEFAULT_SUMMARY_LABEL = "Valorisation CEE"
LED_UNIT_LABEL = "Nombre Led"


def _format_number(value: float, min_fraction: int, max_fraction: int) -> str:
    quantum = Decimal(1).scaleb(-max_fraction)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)

    sign = "-" if rounded < 0 else ""
    integer_part, _, fraction = f"{abs(rounded):f}".partition(".")

    fraction = fraction.rstrip("0").ljust(min_fraction, "0")
    grouped = f"{int(integer_part):,}".replace(",", NARROW_NBSP)

    return f"{sign}{grouped},{fraction}" if fraction else f"{sign}{grouped}"


def format_currency(value: float) -> str:
    """1234.5 -> '1 234,50 €' (завжди два знаки)."""
    return f"{_format_number(value, 2, 2)}{NBSP}€"


def format_decimal(value: float) -> str:
    """0.5 -> '0,5'; 20.0 -> '20'; максимум два знаки після коми."""
    return _format_number(value, 0, 2)


# ---------------------------------------------------------------------------
# Рядок проєкту
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LineDisplay:
    label: str
    valorisation: str
    details: str
    prime: str
    lighting_calculation: Optional[str] = None
    warning: Optional[str] = None


def summary_label(entry: LineValorisation) -> str:
    label = entry.multiplier_label if entry.multiplier_label and entry.multiplier_label.strip() else None
    base = label or DEFAULT_SUMMARY_LABEL
    return f"{base} ({entry.product_code})" if entry.product_code else base


def summary_details(entry: LineValorisation) -> str:
    """
    '0,5 MWh × 40 = 20 MWh' або причина, чому нічого не пораховано.

    Пріоритет причин: динамічні параметри → kWh → загальне "не пораховано".
    """
    multiplier = to_number(entry.multiplier_value)
    if entry.result is not None and multiplier is not None and multiplier > 0:
        return (
            f"{format_decimal(entry.result.valorisation_per_unit_mwh)} MWh × {format_decimal(multiplier)}"
            f" = {format_decimal(entry.result.valorisation_total_mwh)} MWh"
        )
    if entry.missing_dynamic_params:
        return MISSING_DYNAMIC_PARAMS
    if entry.missing_kwh:
        return MISSING_KWH
    return PRIME_NOT_COMPUTED


def valorisation_text(entry: LineValorisation) -> str:
    result = entry.result
    if is_lighting_category(entry.product_category):
        if result is not None and result.lighting is not None and result.lighting.per_led_eur is not None:
            return f"Valorisation {LED_UNIT_LABEL} : {format_currency(result.lighting.per_led_eur)} / {LED_UNIT_LABEL}"
        if result is not None:
            unit = entry.multiplier_label or LED_UNIT_LABEL
            return f"Valorisation {LED_UNIT_LABEL} : {format_currency(result.valorisation_per_unit_eur)} / {unit}"
        return f"Valorisation {LED_UNIT_LABEL} : {NOT_COMPUTED}"

    if result is None:
        return NOT_COMPUTED
    return f"{format_currency(result.valorisation_per_unit_eur)} / {entry.multiplier_label or 'unité'}"


def lighting_calculation_text(entry: LineValorisation) -> Optional[str]:
    if not is_lighting_category(entry.product_category):
        return None
    if entry.result is None or entry.result.lighting is None:
        return None
    lighting = entry.result.lighting
    if lighting.per_led_mwh is None or lighting.total_mwh is None:
        return None
    return (
        f"Soit {format_decimal(lighting.per_led_mwh)} MWh × {LED_UNIT_LABEL}"
        f" = {format_decimal(lighting.total_mwh)} MWh"
    )


def lighting_warning(entry: LineValorisation) -> Optional[str]:
    if not is_lighting_category(entry.product_category):
        return None
    if entry.result is not None and entry.result.lighting is not None and entry.result.lighting.missing_base:
        return LIGHTING_MISSING_BASE
    return None


def prime_text(entry: LineValorisation) -> str:
    if entry.result is None:
        return PRIME_NOT_COMPUTED
    return f"Prime calculée : {format_currency(entry.result.total_prime)}"


def build_line_display(entry: LineValorisation) -> LineDisplay:
    return LineDisplay(
        label=summary_label(entry),
        valorisation=valorisation_text(entry),
        details=summary_details(entry),
        prime=prime_text(entry),
        lighting_calculation=lighting_calculation_text(entry),
        warning=lighting_warning(entry),
    )


def project_total_text(valorisation: ProjectValorisation) -> str:
    """'1 234,56 € (20 MWh)' або 'Non calculée', якщо жоден рядок не пораховано."""
    if not any(entry.result is not None for entry in valorisation.entries):
        return NOT_COMPUTED
    totals = valorisation.totals
    return (
        f"{format_currency(totals.total_valorisation_eur)}"
        f" ({format_decimal(totals.total_valorisation_mwh)} MWh)"
    )
