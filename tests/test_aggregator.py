import pytest

from primecee.domain.aggregator import compute_project_cee_totals
from primecee.domain.models import PrimeCeeResult


def _result(mwh: float, eur: float, prime: float) -> PrimeCeeResult:
    return PrimeCeeResult(
        multiplier=1,
        delegate_price=0,
        valorisation_per_unit_mwh=mwh,
        valorisation_per_unit_eur=eur,
        valorisation_total_mwh=mwh,
        valorisation_total_eur=eur,
        total_prime=prime,
    )


def test_none_results_are_skipped():
    totals = compute_project_cee_totals([_result(10, 100, 100), None, _result(5, 50, 50)])

    assert totals.total_prime == pytest.approx(150.0)
    assert totals.total_valorisation_eur == pytest.approx(150.0)
    assert totals.total_valorisation_mwh == pytest.approx(15.0)


def test_empty_project_is_all_zero():
    totals = compute_project_cee_totals([])

    assert totals.total_prime == 0.0
    assert totals.total_valorisation_eur == 0.0
    assert totals.total_valorisation_mwh == 0.0


def test_accepts_generator():
    totals = compute_project_cee_totals(r for r in [None, None, _result(1, 2, 3)])
    assert totals.total_prime == 3.0
