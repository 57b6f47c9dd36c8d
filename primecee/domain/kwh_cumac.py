# primecee/domain/kwh_cumac.py

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional

from primecee.domain.models import KwhCumacEntry
from primecee.utils.parse_utils import normalize_key, to_positive_number

logger = logging.getLogger(__name__)

# Межа площі будівлі для тарифів освітлення (< 400 m² / >= 400 m²).
LIGHTING_SURFACE_THRESHOLD_M2 = 400.0


def _matching_entries(
    entries: Optional[Iterable[KwhCumacEntry]],
    building_type: Optional[str],
) -> Iterator[KwhCumacEntry]:
    target = normalize_key(building_type)
    if not target or not entries:
        return
    for entry in entries:
        if normalize_key(entry.building_type) == target:
            yield entry


def lookup_kwh_cumac(
    entries: Optional[Iterable[KwhCumacEntry]],
    building_type: Optional[str],
) -> Optional[float]:
    """
    kWh cumac для типу будівлі проєкту.

    None, якщо тип будівлі порожній або жоден рядок цього типу
    не має додатного kwh_cumac. Ніяких дефолтів.
    """
    for entry in _matching_entries(entries, building_type):
        value = to_positive_number(entry.kwh_cumac)
        if value is not None:
            return value

    logger.debug("[CEE] Немає kWh cumac для building_type=%r", building_type)
    return None


def lookup_lighting_base_kwh(
    entries: Optional[Iterable[KwhCumacEntry]],
    building_type: Optional[str],
    building_surface: Optional[float] = None,
) -> Optional[float]:
    """
    База kWh cumac на один світильник для освітлення.

    - рядок без тарифів по площі → kwh_cumac рядка;
    - рядок з тарифами і площа будівлі відома → тариф за її діапазоном
      (kwh_cumac_lt_400 / kwh_cumac_gte_400), без fallback на kwh_cumac;
    - площа невідома → kwh_cumac рядка.

    None означає "немає бази для цієї типології" (missing_base).
    """
    surface = to_positive_number(building_surface)

    for entry in _matching_entries(entries, building_type):
        tiered = (
            to_positive_number(entry.kwh_cumac_lt_400) is not None
            or to_positive_number(entry.kwh_cumac_gte_400) is not None
        )
        if surface is None or not tiered:
            value = to_positive_number(entry.kwh_cumac)
        elif surface < LIGHTING_SURFACE_THRESHOLD_M2:
            value = to_positive_number(entry.kwh_cumac_lt_400)
        else:
            value = to_positive_number(entry.kwh_cumac_gte_400)

        if value is not None:
            return value

    logger.debug(
        "[CEE-LIGHTING] Немає бази kWh cumac: building_type=%r, surface=%r",
        building_type,
        building_surface,
    )
    return None
