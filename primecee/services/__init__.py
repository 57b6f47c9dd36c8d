from primecee.services.display import (
    LineDisplay,
    build_line_display,
    format_currency,
    format_decimal,
    project_total_text,
)
from primecee.services.project_valorisation import (
    displayed_product_lines,
    is_helper_product,
    valorise_line,
    valorise_project,
)

__all__ = [
    "LineDisplay",
    "build_line_display",
    "format_currency",
    "format_decimal",
    "project_total_text",
    "displayed_product_lines",
    "is_helper_product",
    "valorise_line",
    "valorise_project",
]
