"""Tests for tenant-to-property matching."""

import pytest
from pydantic import ValidationError

from conftest import make_profile, make_property
from exceptions import InvalidInputError
from matching import (
    compute_category_match,
    compute_overall_match_score,
    estimate_annual_income_from_score,
    estimate_fico_from_credit_score,
    estimate_months_from_employment_score,
    estimate_months_from_rental_history_score,
    generate_match_report,
    sort_by_match_score,
)


@pytest.fixture
def strong_profile():
    return make_profile(income_score=85, credit_score=72, rental_history_score=91, employment_score=88)


class TestEstimates:
    def test_income(self) -> None:
        assert estimate_annual_income_from_score(80) == 120000

    def test_fico(self) -> None:
        assert estimate_fico_from_credit_score(80) == 750

    def test_rental_months(self) -> None:
        assert estimate_months_from_rental_history_score(50) == pytest.approx(40)

    def test_employment_months(self) -> None:
        assert estimate_months_from_employment_score(50) == pytest.approx(30)

    def test_negative_score_rejected(self) -> None:
        with pytest.raises(InvalidInputError):
            estimate_annual_income_from_score(-5)


class TestCategoryMatch:
    @pytest.mark.parametrize("estimated", [0, 10, 120000])
    def test_missing_requirement_is_full_match(self, estimated) -> None:
        assert compute_category_match(estimated, None) == 100

    def test_zero_requirement_is_no_constraint(self) -> None:
        assert compute_category_match(500, 0) == 100

    def test_shortfall_is_proportional(self) -> None:
        assert compute_category_match(48000, 96000) == 50
        assert compute_category_match(1, 3) == 33
        assert compute_category_match(2, 3) == 67

    def test_exceeding_is_capped(self) -> None:
        assert compute_category_match(200000, 96000) == 100


class TestOverallMatchScore:
    def test_missing_inputs_score_zero(self, strong_profile) -> None:
        assert compute_overall_match_score(None, make_property()) == 0
        assert compute_overall_match_score(strong_profile, None) == 0

    def test_requirements_met(self, strong_profile) -> None:
        assert compute_overall_match_score(strong_profile, make_property()) == 100

    def test_partial_match(self, strong_profile) -> None:
        prop = make_property(
            minimum_income=174000,
            minimum_credit_score=740,
            required_employment_stability=24,
        )
        # income 73%, credit 99%, rental 100%, employment 100%
        assert compute_overall_match_score(strong_profile, prop) == 90

    def test_unscored_categories_do_not_penalise(self) -> None:
        assert compute_overall_match_score(make_profile(), make_property()) == 100

    def test_zero_sub_score_is_scored_not_skipped(self) -> None:
        # rental history estimate 0 months against 24 required
        profile = make_profile(rental_history_score=0)
        assert compute_overall_match_score(profile, make_property()) == 80

    def test_property_without_requirements(self) -> None:
        prop = make_property(
            minimum_income=None,
            minimum_credit_score=None,
            required_rental_history=None,
            required_employment_stability=None,
        )
        weak = make_profile(income_score=10, credit_score=5, rental_history_score=0, employment_score=0)
        assert compute_overall_match_score(weak, prop) == 100

    def test_deterministic(self, strong_profile) -> None:
        prop = make_property(minimum_income=174000)
        scores = {compute_overall_match_score(strong_profile, prop) for _ in range(5)}
        assert len(scores) == 1


class TestMatchReport:
    def test_report_details(self, strong_profile) -> None:
        report = generate_match_report(strong_profile, make_property())

        assert report.match_score == 100
        assert report.property.id == 1

        areas = report.match_areas
        assert areas.income.score == 85
        assert areas.income.rating == "Excellent"
        assert areas.income.details == "Required: $96,000/year"
        assert areas.credit_score.score == 72
        assert areas.credit_score.rating == "Good"
        assert areas.credit_score.details == "Required: 700+"
        assert areas.rental_history.details == "Required: 2 years"
        assert areas.employment.details == "Required: 1 years stability"

    def test_no_requirements_details(self, strong_profile) -> None:
        prop = make_property(
            minimum_income=None,
            minimum_credit_score=0,
            required_rental_history=None,
            required_employment_stability=None,
        )
        areas = generate_match_report(strong_profile, prop).match_areas

        assert areas.income.details == "No minimum income requirement"
        assert areas.credit_score.details == "No minimum credit score requirement"
        assert areas.rental_history.details == "No rental history requirement"
        assert areas.employment.details == "No employment stability requirement"

    def test_years_round_half_up(self, strong_profile) -> None:
        prop = make_property(required_rental_history=30)
        areas = generate_match_report(strong_profile, prop).match_areas
        assert areas.rental_history.details == "Required: 3 years"

    def test_unscored_category_reports_zero(self) -> None:
        areas = generate_match_report(make_profile(income_score=90), make_property()).match_areas
        assert areas.credit_score.score == 0
        assert areas.credit_score.rating == "Poor"

    def test_missing_profile_sentinel(self) -> None:
        prop = make_property()
        report = generate_match_report(None, prop)

        assert report.match_score == 0
        for area in (
            report.match_areas.income,
            report.match_areas.credit_score,
            report.match_areas.rental_history,
            report.match_areas.employment,
        ):
            assert area.score == 0
            assert area.rating == "N/A"
            assert area.details == "Information unavailable"

        assert generate_match_report(None, prop) == report

    def test_missing_property_sentinel(self, strong_profile) -> None:
        report = generate_match_report(strong_profile, None)
        assert report.property is None
        assert report.match_score == 0
        assert report.match_areas.income.rating == "N/A"

    def test_sentinel_areas_cannot_be_altered(self) -> None:
        prop = make_property()
        first = generate_match_report(None, prop)

        with pytest.raises(ValidationError):
            first.match_areas.income.score = 42
        with pytest.raises(ValidationError):
            first.match_areas.credit_score.rating = "Excellent"

        again = generate_match_report(None, prop)
        assert again.match_areas.income.score == 0
        assert again.match_areas.income.rating == "N/A"
        assert again.match_areas.credit_score.rating == "N/A"

    def test_fractional_income_requirement(self, strong_profile) -> None:
        areas = generate_match_report(strong_profile, make_property(minimum_income=1234.004)).match_areas
        assert areas.income.details == "Required: $1,234/year"

        areas = generate_match_report(strong_profile, make_property(minimum_income=1234.5)).match_areas
        assert areas.income.details == "Required: $1,234.5/year"


class TestSortByMatchScore:
    def test_orders_highest_first_without_mutating(self) -> None:
        # estimated income 120000
        profile = make_profile(income_score=80)
        a = make_property(id=1, minimum_income=300000)  # 79
        b = make_property(id=2, minimum_income=120000)  # 100
        c = make_property(id=3, minimum_income=200000)  # 86
        properties = [a, b, c]

        ranked = sort_by_match_score(properties, profile)

        assert [p.id for p in ranked] == [2, 3, 1]
        assert [compute_overall_match_score(profile, p) for p in ranked] == [100, 86, 79]
        assert [p.id for p in properties] == [1, 2, 3]
        assert ranked is not properties

    def test_ties_keep_input_order(self) -> None:
        profile = make_profile(income_score=80)
        first = make_property(id=7, minimum_income=300000)
        second = make_property(id=4, minimum_income=300000)
        best = make_property(id=9, minimum_income=None)

        ranked = sort_by_match_score([first, second, best], profile)
        assert [p.id for p in ranked] == [9, 7, 4]

    def test_without_profile_returns_copy(self) -> None:
        properties = [make_property(id=1), make_property(id=2)]
        result = sort_by_match_score(properties, None)
        assert result == properties
        assert result is not properties

    def test_empty(self) -> None:
        assert sort_by_match_score([], make_profile(income_score=50)) == []
