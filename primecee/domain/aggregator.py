# primecee/domain/aggregator.py

from __future__ import annotations

from typing import Iterable, Optional

from primecee.domain.models import PrimeCeeResult, ProjectCeeTotals


def compute_project_cee_totals(results: Iterable[Optional[PrimeCeeResult]]) -> ProjectCeeTotals:
    """
    Сума по рядках проєкту.

    None-результати (не налаштований продукт, немає kWh, немає множника)
    дають 0 і помилкою не вважаються. Порожній список → всі нулі.
    """
    total_mwh = 0.0
    total_eur = 0.0
    total_prime = 0.0

    for result in results:
        if result is None:
            continue
        total_mwh += result.valorisation_total_mwh
        total_eur += result.valorisation_total_eur
        total_prime += result.total_prime

    return ProjectCeeTotals(
        total_valorisation_mwh=total_mwh,
        total_valorisation_eur=total_eur,
        total_prime=total_prime,
    )
