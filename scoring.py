import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from exceptions import InvalidInputError


@dataclass
class CredentialReport:
    income_score: int
    credit_score: int
    rental_history_score: int
    employment_score: int
    overall_score: int
    rating: str
    breakdown: List[Dict[str, Any]]


SCORE_RANGES = {
    "Excellent": (85, 100),
    "Good": (70, 84),
    "Fair": (60, 69),
    "Poor": (0, 59),
}

# Ability to pay is weighted highest. Must sum to 1.0.
CATEGORY_WEIGHTS = {
    "income": 0.35,
    "credit": 0.30,
    "rental_history": 0.20,
    "employment": 0.15,
}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def require_number(name: str, value: float, minimum: Optional[float] = 0) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidInputError(f"{name} must be finite, got {value!r}")
    if minimum is not None and value < minimum:
        raise InvalidInputError(f"{name} must be >= {minimum}, got {value!r}")
    return value


def _clamp_score(score: float) -> float:
    return min(100, max(0, score))


def get_score_rating(score: float) -> str:
    if score >= SCORE_RANGES["Excellent"][0]:
        return "Excellent"
    elif score >= SCORE_RANGES["Good"][0]:
        return "Good"
    elif score >= SCORE_RANGES["Fair"][0]:
        return "Fair"
    else:
        return "Poor"


def get_score_band(score: float) -> Dict[str, Any]:
    rating = get_score_rating(score)
    low, high = SCORE_RANGES[rating]
    return {"rating": rating, "min": low, "max": high}


def rent_to_income_ratio(annual_income: float, monthly_rent: float) -> float:
    require_number("annual_income", annual_income)
    require_number("monthly_rent", monthly_rent)
    if annual_income <= 0:
        raise InvalidInputError("annual_income must be greater than 0")
    return (monthly_rent * 12) / annual_income


def compute_income_score(annual_income: float, monthly_rent: float) -> float:
    """
    Score affordability from the rent-to-income ratio.

    Each band is clamped to its own rating range, and the exact band edges
    (0.25, 0.30, 0.40) belong to the lower, stricter band.
    """
    ratio = rent_to_income_ratio(annual_income, monthly_rent)

    if ratio <= 0.25:
        return min(100, max(85, 100 - ratio * 100))
    elif ratio <= 0.30:
        return min(84, max(70, 95 - (ratio - 0.25) * 200))
    elif ratio <= 0.40:
        return min(69, max(60, 75 - (ratio - 0.30) * 150))
    else:
        return max(0, 55 - (ratio - 0.40) * 100)


def compute_credit_score_rating(fico_score: float) -> float:
    require_number("fico_score", fico_score)

    if fico_score >= 750:
        return min(100, 85 + (fico_score - 750) / 10)
    elif fico_score >= 700:
        return min(84, 70 + (fico_score - 700) / 2)
    elif fico_score >= 650:
        return min(69, 60 + (fico_score - 650) / 2)
    elif fico_score >= 580:
        return min(59, 30 + (fico_score - 580) / 2)
    else:
        return max(0, 30 - (580 - fico_score) / 10)


def compute_rental_history_score(
    years_of_history: float,
    eviction_count: int,
    late_payment_count: int,
) -> float:
    require_number("years_of_history", years_of_history)
    require_number("eviction_count", eviction_count)
    require_number("late_payment_count", late_payment_count)

    score = 70
    score += min(years_of_history, 5) * 5
    # a single eviction outweighs a full rental history
    score -= eviction_count * 50
    score -= late_payment_count * 2
    return _clamp_score(score)


def compute_employment_score(years_at_job: float, months_unemployed_last_3_years: int) -> float:
    require_number("years_at_job", years_at_job)
    require_number("months_unemployed_last_3_years", months_unemployed_last_3_years)

    score = 70
    score += min(years_at_job, 5) * 6
    score -= months_unemployed_last_3_years * 3
    return _clamp_score(score)


def weighted_score(income: float, credit: float, rental_history: float, employment: float) -> int:
    total = (
        income * CATEGORY_WEIGHTS["income"]
        + credit * CATEGORY_WEIGHTS["credit"]
        + rental_history * CATEGORY_WEIGHTS["rental_history"]
        + employment * CATEGORY_WEIGHTS["employment"]
    )
    return round_half_up(total)


def compute_overall_score(income: float, credit: float, rental_history: float, employment: float) -> int:
    for name, value in (
        ("income", income),
        ("credit", credit),
        ("rental_history", rental_history),
        ("employment", employment),
    ):
        require_number(name, value)
        if value > 100:
            raise InvalidInputError(f"{name} sub-score must be <= 100, got {value!r}")

    return weighted_score(income, credit, rental_history, employment)


def derive_profile_fields(
    income_score: Optional[int],
    credit_score: Optional[int],
    rental_history_score: Optional[int],
    employment_score: Optional[int],
    income_verified: bool,
    credit_score_verified: bool,
    rental_history_verified: bool,
    employment_verified: bool,
) -> Dict[str, Any]:
    """Return the derived ``overall_score`` and ``verification_badge`` of a profile."""
    scores = [income_score, credit_score, rental_history_score, employment_score]
    overall = None
    if all(s is not None for s in scores):
        overall = compute_overall_score(*scores)

    badge = all([income_verified, credit_score_verified, rental_history_verified, employment_verified])
    return {"overall_score": overall, "verification_badge": badge}


def _format_ratio(ratio: float) -> str:
    return f"{ratio * 100:.1f}% of income goes to rent"


def score_credentials(
    annual_income: float,
    monthly_rent: float,
    credit_score: float,
    years_of_rental_history: float,
    eviction_count: int,
    late_payment_count: int,
    years_at_current_job: float,
    months_unemployed_last_3_years: int,
) -> CredentialReport:
    ratio = rent_to_income_ratio(annual_income, monthly_rent)

    income = round_half_up(compute_income_score(annual_income, monthly_rent))
    credit = round_half_up(compute_credit_score_rating(credit_score))
    rental = round_half_up(
        compute_rental_history_score(years_of_rental_history, eviction_count, late_payment_count)
    )
    employment = round_half_up(
        compute_employment_score(years_at_current_job, months_unemployed_last_3_years)
    )
    overall = compute_overall_score(income, credit, rental, employment)

    breakdown: List[Dict[str, Any]] = []

    def add_category(category: str, score: int, details: str) -> None:
        breakdown.append(
            {
                "category": category,
                "score": score,
                "rating": get_score_rating(score),
                "weight": CATEGORY_WEIGHTS[category],
                "details": details,
            }
        )

    add_category("income", income, _format_ratio(ratio))
    add_category("credit", credit, f"Credit score {credit_score:g}")
    add_category(
        "rental_history",
        rental,
        f"{years_of_rental_history:g} years of history, {eviction_count} evictions, "
        f"{late_payment_count} late payments",
    )
    add_category(
        "employment",
        employment,
        f"{years_at_current_job:g} years at current job, "
        f"{months_unemployed_last_3_years} months unemployed in the last 3 years",
    )

    return CredentialReport(
        income_score=income,
        credit_score=credit,
        rental_history_score=rental,
        employment_score=employment,
        overall_score=overall,
        rating=get_score_rating(overall),
        breakdown=breakdown,
    )
