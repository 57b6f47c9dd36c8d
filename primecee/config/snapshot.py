from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import logging
import yaml

from primecee.domain.models import CatalogProduct, OrganizationPrimeSettings, Project
from primecee.parsers.product_parser import (
    parse_delegate,
    parse_organization_settings,
    parse_products,
    parse_project_row,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectSnapshot:
    """Read-only знімок: каталог + проєкт + налаштування організації."""
    project: Project
    organization: OrganizationPrimeSettings
    products: Dict[str, CatalogProduct]


def load_snapshot(path: Path) -> Optional[ProjectSnapshot]:
    """
    Читає YAML-знімок:

        organization: {prime_bonification: 2}
        delegate: {price_eur_per_mwh: 7.5}
        products: [{id, code, category, params_schema, cee_config, kwh_cumac_values, ...}]
        project: {id, building_type, building_surface, products: [{id, product_id, quantity, dynamic_params}]}

    Файлу немає / не читається / не той формат → None (з логом).
    """
    if not path.exists():
        logger.error("[SNAPSHOT] Файл не знайдено: %s", path)
        return None

    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.exception("[SNAPSHOT] Неможливо прочитати %s: %s", path, exc)
        return None

    if not isinstance(data, dict):
        logger.error("[SNAPSHOT] Некоректна структура YAML (очікується словник): %s", path)
        return None

    raw_products = data.get("products") or []
    if not isinstance(raw_products, list):
        logger.error("[SNAPSHOT] 'products' має бути списком: %s", path)
        raw_products = []

    raw_project = data.get("project")
    if not isinstance(raw_project, dict):
        logger.error("[SNAPSHOT] Немає секції 'project' у %s", path)
        return None

    products = parse_products(raw_products)
    project = parse_project_row(raw_project, products, delegate=parse_delegate(data.get("delegate")))

    logger.info(
        "[SNAPSHOT] Завантажено %d продуктів і %d рядків проєкту із %s",
        len(products),
        len(project.lines),
        path,
    )

    return ProjectSnapshot(
        project=project,
        organization=parse_organization_settings(data.get("organization")),
        products=products,
    )
