from primecee.parsers.product_parser import (
    parse_cee_config,
    parse_delegate,
    parse_kwh_cumac_entries,
    parse_organization_settings,
    parse_params_schema,
    parse_product_row,
    parse_products,
    parse_project_row,
    parse_valorisation_formula,
)

__all__ = [
    "parse_cee_config",
    "parse_delegate",
    "parse_kwh_cumac_entries",
    "parse_organization_settings",
    "parse_params_schema",
    "parse_product_row",
    "parse_products",
    "parse_project_row",
    "parse_valorisation_formula",
]
