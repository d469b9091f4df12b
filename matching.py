"""
Tenant-to-property match scoring.

A property states minimum requirements in real units (dollars per year, a
FICO-like score, months of history). The tenant profile only carries 0-100
sub-scores, so each sub-score is turned back into an approximate real value
and compared with the requirement as a capped ratio.
"""

from typing import List, Optional, Sequence

from schemas import CategoryMatch, MatchAreas, MatchResult, Property, TenantProfile
from scoring import get_score_rating, require_number, round_half_up, weighted_score

UNAVAILABLE = CategoryMatch(score=0, rating="N/A", details="Information unavailable")


def estimate_annual_income_from_score(income_score: float) -> float:
    return require_number("income_score", income_score) * 1500


def estimate_fico_from_credit_score(credit_score: float) -> float:
    return 550 + require_number("credit_score", credit_score) * 2.5


def estimate_months_from_rental_history_score(score: float) -> float:
    return require_number("rental_history_score", score) * 0.8


def estimate_months_from_employment_score(score: float) -> float:
    return require_number("employment_score", score) * 0.6


def compute_category_match(estimated_value: float, required_value: Optional[float]) -> int:
    """
    Percentage of a requirement met, capped at 100.

    A missing (or zero) requirement is no constraint at all and always
    matches fully.
    """
    if not required_value:
        return 100
    require_number("estimated_value", estimated_value)
    require_number("required_value", required_value)
    return min(100, round_half_up((estimated_value / required_value) * 100))


def _category_match(tenant_score, estimate, required_value) -> int:
    # an unscored category has nothing to compare against
    if tenant_score is None:
        return 100
    return compute_category_match(estimate(tenant_score), required_value)


def compute_overall_match_score(
    tenant_profile: Optional[TenantProfile],
    property: Optional[Property],
) -> int:
    if tenant_profile is None or property is None:
        return 0

    income = _category_match(
        tenant_profile.income_score,
        estimate_annual_income_from_score,
        property.minimum_income,
    )
    credit = _category_match(
        tenant_profile.credit_score,
        estimate_fico_from_credit_score,
        property.minimum_credit_score,
    )
    rental = _category_match(
        tenant_profile.rental_history_score,
        estimate_months_from_rental_history_score,
        property.required_rental_history,
    )
    employment = _category_match(
        tenant_profile.employment_score,
        estimate_months_from_employment_score,
        property.required_employment_stability,
    )
    return weighted_score(income, credit, rental, employment)


def _format_amount(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}".rstrip("0").rstrip(".")


def _years(months: float) -> int:
    return round_half_up(months / 12)


def _requirement_details(property: Property) -> dict:
    return {
        "income": (
            f"Required: ${_format_amount(property.minimum_income)}/year"
            if property.minimum_income
            else "No minimum income requirement"
        ),
        "credit_score": (
            f"Required: {property.minimum_credit_score}+"
            if property.minimum_credit_score
            else "No minimum credit score requirement"
        ),
        "rental_history": (
            f"Required: {_years(property.required_rental_history)} years"
            if property.required_rental_history
            else "No rental history requirement"
        ),
        "employment": (
            f"Required: {_years(property.required_employment_stability)} years stability"
            if property.required_employment_stability
            else "No employment stability requirement"
        ),
    }


def _area(score: Optional[int], details: str) -> CategoryMatch:
    score = score or 0
    return CategoryMatch(score=score, rating=get_score_rating(score), details=details)


def generate_match_report(
    tenant_profile: Optional[TenantProfile],
    property: Optional[Property],
) -> MatchResult:
    if tenant_profile is None or property is None:
        return MatchResult(
            property=property,
            match_score=0,
            match_areas=MatchAreas(
                income=UNAVAILABLE,
                credit_score=UNAVAILABLE,
                rental_history=UNAVAILABLE,
                employment=UNAVAILABLE,
            ),
        )

    details = _requirement_details(property)

    return MatchResult(
        property=property,
        match_score=compute_overall_match_score(tenant_profile, property),
        match_areas=MatchAreas(
            income=_area(tenant_profile.income_score, details["income"]),
            credit_score=_area(tenant_profile.credit_score, details["credit_score"]),
            rental_history=_area(tenant_profile.rental_history_score, details["rental_history"]),
            employment=_area(tenant_profile.employment_score, details["employment"]),
        ),
    )


def sort_by_match_score(
    properties: Sequence[Property],
    tenant_profile: Optional[TenantProfile],
) -> List[Property]:
    """
    Return a new list ordered by match score, highest first.

    The sort is stable, so properties with equal scores keep their input order.
    """
    if not properties or tenant_profile is None:
        return list(properties or [])

    scored = [(compute_overall_match_score(tenant_profile, p), p) for p in properties]
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [p for _, p in scored]

