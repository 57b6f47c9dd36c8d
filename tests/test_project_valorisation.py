import pytest

from primecee.config.env import ValorisationConfig, load_valorisation_config
from primecee.domain.models import CatalogProduct, OrganizationPrimeSettings
from primecee.parsers import parse_products, parse_project_row
from primecee.services.display import build_line_display
from primecee.services.project_valorisation import (
    displayed_product_lines,
    is_helper_product,
    valorise_project,
)

CATALOG = [
    {
        "id": "iso",
        "code": "BAR-EN-101",
        "name": "Isolation combles",
        "category": "isolation",
        "params_schema": [{"name": "surface_isolee", "label": "Surface isolée"}],
        "cee_config": {"category": "isolation", "primeMultiplierParam": "surface_isolee"},
        "kwh_cumac_values": [
            {"building_type": "Maison", "kwh_cumac": 250},
            {"building_type": "Appartement", "kwh_cumac": 150},
        ],
    },
    {
        "id": "led",
        "code": "BAT-EQ-127",
        "name": "Luminaires LED",
        "category": "lighting",
        "params_schema": [{"name": "nombre_led", "label": "Nombre Led"}],
        "cee_config": {"category": "lighting", "ledWattConstant": 100},
        "kwh_cumac_values": [
            {"building_type": "Maison", "kwh_cumac": 5000},
            {"building_type": "Bureaux", "kwh_cumac": 6000, "kwh_cumac_lt_400": 6500},
        ],
    },
    {
        "id": "led-formula",
        "code": "BAT-EQ-127-F",
        "name": "Luminaires LED (formule)",
        "category": "lighting",
        "params_schema": [{"name": "nombre_led", "label": "Nombre Led"}],
        "cee_config": {"category": "lighting", "formulaTemplate": "lighting-led", "ledWattConstant": 100},
        "kwh_cumac_values": [{"building_type": "Maison", "kwh_cumac": 5000}],
    },
    {
        "id": "led-nowatt",
        "code": "BAT-EQ-127-N",
        "name": "Luminaires LED sans puissance",
        "category": "lighting",
        "params_schema": [{"name": "nombre_led", "label": "Nombre Led"}],
        "cee_config": {"category": "lighting"},
        "kwh_cumac_values": [
            {"building_type": "Maison", "kwh_cumac": 5000},
            {"building_type": "Bureaux", "kwh_cumac": 6000, "kwh_cumac_lt_400": 6500},
        ],
    },
    {
        "id": "eco",
        "code": "ECO-FRAIS",
        "name": "Frais de dossier",
        "category": "other",
        "kwh_cumac_values": [{"building_type": "Maison", "kwh_cumac": 999}],
    },
]


def _project(building_type="Maison", lines=None, price=5, surface=None):
    products = parse_products(CATALOG)
    raw = {
        "id": "proj-1",
        "building_type": building_type,
        "building_surface": surface,
        "delegate": {"price_eur_per_mwh": price},
        "products": lines
        if lines is not None
        else [
            {"id": "l-iso", "product_id": "iso", "quantity": 1, "dynamic_params": {"surface_isolee": "40"}},
            {"id": "l-eco", "product_id": "eco", "quantity": 1},
        ],
    }
    return parse_project_row(raw, products)


def test_helper_products_are_filtered_once_upstream():
    project = _project()

    assert is_helper_product(project.lines[1].product) is True
    assert [line.id for line in displayed_product_lines(project.lines)] == ["l-iso"]

    valorisation = valorise_project(project, OrganizationPrimeSettings(bonification=2))

    assert [e.project_product_id for e in valorisation.entries] == ["l-iso"]
    assert valorisation.totals.total_prime == pytest.approx(100.0)


def test_reference_line_figures():
    valorisation = valorise_project(_project(), OrganizationPrimeSettings(bonification=2))
    entry = valorisation.entries[0]

    assert entry.multiplier_value == 40.0
    assert entry.multiplier_label == "Surface isolée"
    assert entry.missing_kwh is False
    assert entry.missing_dynamic_params is False
    assert entry.result.valorisation_per_unit_mwh == pytest.approx(0.5)
    assert entry.result.valorisation_total_mwh == pytest.approx(20.0)
    assert entry.result.valorisation_total_eur == pytest.approx(100.0)
    assert entry.result.total_prime == pytest.approx(100.0)


def test_default_bonification_when_organization_unset():
    valorisation = valorise_project(_project(), None, ValorisationConfig(default_bonification=3))
    assert valorisation.entries[0].result.valorisation_per_unit_mwh == pytest.approx(0.75)


def test_missing_dynamic_params_and_missing_kwh_are_independent():
    lines = [{"id": "l-iso", "product_id": "iso", "quantity": 5, "dynamic_params": {}}]

    entry = valorise_project(_project(building_type="Hangar", lines=lines)).entries[0]

    assert entry.result is None
    assert entry.missing_dynamic_params is True
    assert entry.missing_kwh is True


def test_blank_building_type_flags_missing_kwh():
    entry = valorise_project(_project(building_type="  ")).entries[0]

    assert entry.result is None
    assert entry.missing_kwh is True
    assert entry.missing_dynamic_params is False


def test_unknown_product_line_is_not_an_error():
    lines = [{"product_id": "ghost", "quantity": 3}]

    valorisation = valorise_project(_project(lines=lines))

    assert len(valorisation.entries) == 1
    assert valorisation.entries[0].project_product_id == "ghost"
    assert valorisation.entries[0].result is None
    assert valorisation.totals.total_prime == 0.0


def test_line_without_ids_gets_positional_id():
    products = parse_products(CATALOG)
    project = parse_project_row({"building_type": "Maison", "products": [{"quantity": 1}]}, products)

    assert valorise_project(project).entries[0].project_product_id == "product-0"


def test_lighting_line_uses_per_led_figures():
    lines = [{"id": "l-led", "product_id": "led", "dynamic_params": {"nombre_led": 10}}]

    entry = valorise_project(_project(lines=lines, price=10), OrganizationPrimeSettings(bonification=2)).entries[0]

    lighting = entry.result.lighting
    assert entry.multiplier_value == 10.0
    assert lighting.missing_base is False
    # 5000 × 2 × 0.1 kW / 1000 = 1 MWh par LED
    assert lighting.per_led_mwh == pytest.approx(1.0)
    assert lighting.total_eur == pytest.approx(100.0)
    assert entry.result.total_prime == pytest.approx(100.0)


def test_lighting_tier_missing_raises_warning_flag_not_null_result():
    lines = [{"id": "l-led", "product_id": "led", "dynamic_params": {"nombre_led": 10}}]

    entry = valorise_project(_project(building_type="Bureaux", lines=lines, surface=800)).entries[0]

    assert entry.result is not None
    assert entry.result.lighting.missing_base is True
    assert entry.result.total_prime == 0.0


def test_lighting_missing_base_without_wattage_still_warns():
    lines = [{"id": "l-led", "product_id": "led-nowatt", "dynamic_params": {"nombre_led": 10}}]

    entry = valorise_project(_project(building_type="Bureaux", lines=lines, surface=800)).entries[0]

    assert entry.result is not None
    assert entry.result.lighting is not None
    assert entry.result.lighting.missing_base is True
    assert entry.result.total_prime == 0.0
    assert build_line_display(entry).warning == "kWh cumac manquant pour cette typologie"


def test_lighting_without_wattage_keeps_generic_prime():
    lines = [{"id": "l-led", "product_id": "led-nowatt", "dynamic_params": {"nombre_led": 10}}]

    entry = valorise_project(_project(lines=lines, price=10), OrganizationPrimeSettings(bonification=2)).entries[0]

    lighting = entry.result.lighting
    assert lighting is not None
    assert lighting.missing_base is False
    assert lighting.per_led_eur is None
    # 5000 × 2 / 1000 = 10 MWh par unité, × 10 LED × 10 €
    assert entry.result.total_prime == pytest.approx(1000.0)
    assert build_line_display(entry).warning is None


def test_lighting_led_template_without_bonus_dom_keeps_generic_per_unit():
    products = parse_products(CATALOG)
    assert products["led-formula"].cee_config.formula_expression == "KWH_CUMAC * BONUS_DOM * LED_WATT / MWH_DIVISOR"

    lines = [{"id": "l-led", "product_id": "led-formula", "dynamic_params": {"nombre_led": 10}}]
    entry = valorise_project(_project(lines=lines, price=10), OrganizationPrimeSettings(bonification=2)).entries[0]

    assert entry.result.valorisation_per_unit_mwh == pytest.approx(10.0)
    assert entry.result.valorisation_total_mwh == pytest.approx(100.0)
    assert entry.result.lighting.per_led_mwh == pytest.approx(1.0)
    assert entry.result.total_prime == pytest.approx(100.0)


def test_lighting_led_template_uses_bonus_dom_from_line():
    lines = [{"id": "l-led", "product_id": "led-formula", "dynamic_params": {"nombre_led": 10, "bonus_dom": 3}}]

    entry = valorise_project(_project(lines=lines, price=10), OrganizationPrimeSettings(bonification=2)).entries[0]

    # 5000 × 3 × 100 / 1000
    assert entry.result.valorisation_per_unit_mwh == pytest.approx(1500.0)


def test_valorisation_is_idempotent():
    project = _project()
    organization = OrganizationPrimeSettings(bonification=2)

    assert valorise_project(project, organization) == valorise_project(project, organization)


def test_empty_project_totals_are_zero():
    valorisation = valorise_project(_project(lines=[]))

    assert valorisation.entries == ()
    assert valorisation.totals.total_prime == 0.0
    assert valorisation.totals.total_valorisation_mwh == 0.0


def test_eco_lines_stay_excluded_whatever_the_settings(monkeypatch):
    monkeypatch.delenv("CEE_DEFAULT_BONIFICATION", raising=False)
    monkeypatch.setenv("CEE_HELPER_CODE_PREFIX", "BAR")
    settings = load_valorisation_config()

    for cfg in (settings, ValorisationConfig(default_bonification=5, lighting_default_led_watt=36)):
        valorisation = valorise_project(_project(), None, cfg)

        assert [e.product_code for e in valorisation.entries] == ["BAR-EN-101"]
        assert valorisation.totals.total_prime == pytest.approx(20.0 * cfg.default_bonification / 2 * 5)


@pytest.mark.parametrize("code", ["ECO-FRAIS", "eco-frais", " Eco-x", "ECO"])
def test_is_helper_product_ignores_case(code):
    assert is_helper_product(CatalogProduct(id="h", code=code)) is True


def test_is_helper_product_false_for_regular_codes():
    assert is_helper_product(CatalogProduct(id="p", code="BAR-EN-101")) is False
    assert is_helper_product(CatalogProduct(id="p", code=None)) is False
    assert is_helper_product(None) is False
