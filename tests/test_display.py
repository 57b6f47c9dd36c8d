import pytest

from primecee.domain.models import (
    LightingDetails,
    LineValorisation,
    PrimeCeeResult,
    ProjectCeeTotals,
    ProjectValorisation,
)
from primecee.services.display import (
    build_line_display,
    format_currency,
    format_decimal,
    project_total_text,
    summary_details,
)

NNBSP = "\u202f"
NBSP = "\u00a0"


def _entry(result=None, **kwargs) -> LineValorisation:
    values = dict(
        project_product_id="l1",
        product_code="BAR-EN-101",
        product_name="Isolation combles",
        product_category="isolation",
        multiplier_label="Surface isolée",
        multiplier_value=40.0,
        result=result,
        missing_dynamic_params=False,
        missing_kwh=False,
    )
    values.update(kwargs)
    return LineValorisation(**values)


def _result(lighting=None) -> PrimeCeeResult:
    return PrimeCeeResult(
        multiplier=40,
        delegate_price=5,
        valorisation_per_unit_mwh=0.5,
        valorisation_per_unit_eur=2.5,
        valorisation_total_mwh=20,
        valorisation_total_eur=100,
        total_prime=100,
        lighting=lighting,
    )


@pytest.mark.parametrize(
    "value, expected",
    [
        (1234.56, f"1{NNBSP}234,56{NBSP}€"),
        (100, f"100,00{NBSP}€"),
        (0.005, f"0,01{NBSP}€"),
        (-2.5, f"-2,50{NBSP}€"),
        (1234567.891, f"1{NNBSP}234{NNBSP}567,89{NBSP}€"),
    ],
)
def test_format_currency(value, expected):
    assert format_currency(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [(0.5, "0,5"), (20.0, "20"), (0.2149, "0,21"), (1234.5, f"1{NNBSP}234,5"), (0, "0")],
)
def test_format_decimal(value, expected):
    assert format_decimal(value) == expected


def test_summary_for_computed_line():
    display = build_line_display(_entry(_result()))

    assert display.label == "Surface isolée (BAR-EN-101)"
    assert display.details == "0,5 MWh × 40 = 20 MWh"
    assert display.valorisation == f"2,50{NBSP}€ / Surface isolée"
    assert display.prime == f"Prime calculée : 100,00{NBSP}€"
    assert display.warning is None
    assert display.lighting_calculation is None


@pytest.mark.parametrize(
    "flags, expected",
    [
        ({"missing_dynamic_params": True, "missing_kwh": True}, "Paramètres dynamiques manquants"),
        ({"missing_kwh": True}, "Aucune valeur kWh pour ce bâtiment"),
        ({}, "Prime non calculée"),
    ],
)
def test_reason_strings(flags, expected):
    entry = _entry(None, multiplier_value=None, **flags)
    assert summary_details(entry) == expected
    assert build_line_display(entry).prime == "Prime non calculée"


def test_lighting_line_texts():
    lighting = LightingDetails(
        per_led_mwh=0.5,
        per_led_eur=0.21,
        total_mwh=5,
        total_eur=2.1,
        missing_base=False,
        led_watt=36,
        base_kwh=5000,
    )
    entry = _entry(_result(lighting), product_category="Lighting", multiplier_label="Nombre Led")

    display = build_line_display(entry)

    assert display.valorisation == f"Valorisation Nombre Led : 0,21{NBSP}€ / Nombre Led"
    assert display.lighting_calculation == "Soit 0,5 MWh × Nombre Led = 5 MWh"
    assert display.warning is None


def test_lighting_missing_base_warning():
    lighting = LightingDetails(
        per_led_mwh=0,
        per_led_eur=0,
        total_mwh=0,
        total_eur=0,
        missing_base=True,
    )
    entry = _entry(_result(lighting), product_category="lighting")

    assert build_line_display(entry).warning == "kWh cumac manquant pour cette typologie"


def test_lighting_without_led_watt_falls_back_to_generic_texts():
    lighting = LightingDetails(missing_base=False, base_kwh=5000)
    entry = _entry(_result(lighting), product_category="lighting", multiplier_label="Nombre Led")

    display = build_line_display(entry)

    assert display.valorisation == f"Valorisation Nombre Led : 2,50{NBSP}€ / Nombre Led"
    assert display.lighting_calculation is None
    assert display.warning is None
    assert display.prime == f"Prime calculée : 100,00{NBSP}€"


def test_default_label_without_multiplier():
    entry = _entry(None, multiplier_label=None, product_code=None, multiplier_value=None)
    display = build_line_display(entry)

    assert display.label == "Valorisation CEE"
    assert display.valorisation == "Non calculée"


def test_project_total_text():
    computed = ProjectValorisation(
        entries=(_entry(_result()),),
        totals=ProjectCeeTotals(total_valorisation_mwh=20, total_valorisation_eur=100, total_prime=100),
    )
    empty = ProjectValorisation(entries=(_entry(None),), totals=ProjectCeeTotals())

    assert project_total_text(computed) == f"100,00{NBSP}€ (20 MWh)"
    assert project_total_text(empty) == "Non calculée"
