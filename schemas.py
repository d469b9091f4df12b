from datetime import date, datetime
from typing import ClassVar, FrozenSet, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


UserType = Literal["tenant", "landlord", "admin"]
DocumentType = Literal["income_proof", "credit_report", "rental_history", "employment_proof"]
ApplicationStatus = Literal["pending", "approved", "rejected"]


def score_field():
    return Field(default=None, ge=0, le=100)


class PatchModel(BaseModel):
    """Base for partial updates: only declared fields, unknown keys rejected."""

    model_config = ConfigDict(extra="forbid")

    # fields that may be explicitly cleared with null
    nullable: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def _reject_null(self):
        for name in self.model_fields_set:
            if getattr(self, name) is None and name not in self.nullable:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


# -------------------------
# Users
# -------------------------

class UserCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    username: str = Field(min_length=1)
    password: str = Field(min_length=1, max_length=128)
    email: str = Field(min_length=3)
    full_name: str = Field(min_length=1)
    user_type: UserType
    phone: Optional[str] = None
    profile_picture: Optional[str] = None


class UserPublic(BaseModel):
    id: int
    username: str
    email: str
    full_name: str
    user_type: UserType
    phone: Optional[str] = None
    profile_picture: Optional[str] = None
    created_at: datetime


class User(UserPublic):
    password_hash: str

    def public(self) -> UserPublic:
        return UserPublic(**self.model_dump(exclude={"password_hash"}))


class LoginRequest(BaseModel):
    username: str
    password: str


# -------------------------
# Tenant credential profiles
# -------------------------

class TenantProfileCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user_id: int
    income_verified: bool = False
    credit_score_verified: bool = False
    rental_history_verified: bool = False
    employment_verified: bool = False
    income_score: Optional[int] = score_field()
    credit_score: Optional[int] = score_field()
    rental_history_score: Optional[int] = score_field()
    employment_score: Optional[int] = score_field()
    verified_at: Optional[datetime] = None


class TenantProfileUpdate(PatchModel):
    nullable: ClassVar[FrozenSet[str]] = frozenset(
        {"income_score", "credit_score", "rental_history_score", "employment_score", "verified_at"}
    )

    income_verified: Optional[bool] = None
    credit_score_verified: Optional[bool] = None
    rental_history_verified: Optional[bool] = None
    employment_verified: Optional[bool] = None
    income_score: Optional[int] = score_field()
    credit_score: Optional[int] = score_field()
    rental_history_score: Optional[int] = score_field()
    employment_score: Optional[int] = score_field()
    verified_at: Optional[datetime] = None


class TenantProfile(BaseModel):
    id: int
    user_id: int
    income_verified: bool = False
    credit_score_verified: bool = False
    rental_history_verified: bool = False
    employment_verified: bool = False
    income_score: Optional[int] = None
    credit_score: Optional[int] = None
    rental_history_score: Optional[int] = None
    employment_score: Optional[int] = None
    overall_score: Optional[int] = None
    verification_badge: bool = False
    verified_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TenantFinancialInputs(BaseModel):
    model_config = ConfigDict(extra="forbid")

    annual_income: float = Field(gt=0, allow_inf_nan=False)
    monthly_rent: float = Field(ge=0, allow_inf_nan=False)
    credit_score: int = Field(ge=0, le=1000)
    years_of_rental_history: float = Field(ge=0, allow_inf_nan=False)
    eviction_count: int = Field(ge=0)
    late_payment_count: int = Field(ge=0)
    years_at_current_job: float = Field(ge=0, allow_inf_nan=False)
    months_unemployed_last_3_years: int = Field(ge=0, le=36)


class CredentialCategory(BaseModel):
    category: str
    score: int
    rating: str
    weight: float
    details: str


class CredentialScoreResponse(BaseModel):
    income_score: int
    credit_score: int
    rental_history_score: int
    employment_score: int
    overall_score: int
    rating: str
    breakdown: List[CredentialCategory]


# -------------------------
# Properties
# -------------------------

class PropertyCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    landlord_id: int
    title: str = Field(min_length=1)
    description: str
    address: str
    city: str
    state: str
    zip_code: str
    price_per_month: float = Field(ge=0, allow_inf_nan=False)
    bedrooms: int = Field(ge=0)
    bathrooms: float = Field(ge=0, allow_inf_nan=False)
    square_feet: int = Field(ge=0)
    property_type: str
    available_from: date
    featured: bool = False
    images: List[str] = Field(default_factory=list)
    minimum_income: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    minimum_credit_score: Optional[int] = Field(default=None, ge=0)
    required_rental_history: Optional[int] = Field(default=None, ge=0)
    required_employment_stability: Optional[int] = Field(default=None, ge=0)


class PropertyUpdate(PatchModel):
    nullable: ClassVar[FrozenSet[str]] = frozenset(
        {
            "minimum_income",
            "minimum_credit_score",
            "required_rental_history",
            "required_employment_stability",
        }
    )

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    price_per_month: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    bedrooms: Optional[int] = Field(default=None, ge=0)
    bathrooms: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    square_feet: Optional[int] = Field(default=None, ge=0)
    property_type: Optional[str] = None
    available_from: Optional[date] = None
    featured: Optional[bool] = None
    images: Optional[List[str]] = None
    minimum_income: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    minimum_credit_score: Optional[int] = Field(default=None, ge=0)
    required_rental_history: Optional[int] = Field(default=None, ge=0)
    required_employment_stability: Optional[int] = Field(default=None, ge=0)


class Property(PropertyCreate):
    model_config = ConfigDict(extra="ignore")

    id: int
    created_at: datetime
    updated_at: datetime


class PropertySearch(BaseModel):
    city: Optional[str] = None
    state: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    property_type: Optional[str] = None


# -------------------------
# Documents
# -------------------------

class DocumentCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user_id: int
    document_type: DocumentType
    file_name: str = Field(min_length=1)
    file_url: str = Field(min_length=1)


class Document(DocumentCreate):
    model_config = ConfigDict(extra="ignore")

    id: int
    verified: bool = False
    verified_at: Optional[datetime] = None
    uploaded_at: datetime


# -------------------------
# Property views / applications
# -------------------------

class PropertyViewCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    property_id: int
    tenant_id: int
    match_score: Optional[int] = score_field()
    application_status: ApplicationStatus = "pending"
    viewing_date: Optional[datetime] = None
    notes: Optional[str] = None


class PropertyViewUpdate(PatchModel):
    nullable: ClassVar[FrozenSet[str]] = frozenset({"viewing_date", "notes"})

    match_score: Optional[int] = score_field()
    application_status: Optional[ApplicationStatus] = None
    viewing_date: Optional[datetime] = None
    notes: Optional[str] = None


class PropertyView(BaseModel):
    id: int
    property_id: int
    tenant_id: int
    match_score: int
    application_status: ApplicationStatus = "pending"
    viewing_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime


# -------------------------
# Matching outputs
# -------------------------

class CategoryMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int
    rating: str
    details: str


class MatchAreas(BaseModel):
    income: CategoryMatch
    credit_score: CategoryMatch
    rental_history: CategoryMatch
    employment: CategoryMatch


class MatchResult(BaseModel):
    property: Optional[Property] = None
    match_score: int
    match_areas: MatchAreas


class PropertyMatch(BaseModel):
    property: Property
    match_score: int


class MatchRequest(BaseModel):
    tenant_id: int
