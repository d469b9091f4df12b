import logging
from functools import lru_cache
from typing import Any, List, Optional

from fastapi import Body, Depends, FastAPI, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from auth import SESSION_COOKIE, authenticate, get_current_user, hash_password, make_session_token
from config import get_settings
from exceptions import (
    NotFoundError,
    RentMatchError,
    general_exception_handler,
    rentmatch_exception_handler,
)
from logging_setup import setup_logging
from matching import compute_overall_match_score, generate_match_report, sort_by_match_score
from schemas import (
    CredentialScoreResponse,
    Document,
    DocumentCreate,
    LoginRequest,
    MatchRequest,
    MatchResult,
    Property,
    PropertyCreate,
    PropertyMatch,
    PropertySearch,
    PropertyUpdate,
    PropertyView,
    PropertyViewCreate,
    PropertyViewUpdate,
    TenantFinancialInputs,
    TenantProfile,
    TenantProfileCreate,
    TenantProfileUpdate,
    UserCreate,
    UserPublic,
)
from scoring import score_credentials
from seed import seed_sample_data
from storage import SqliteStorage, Storage
from validation import ValidationFailure, validate

logger = logging.getLogger(__name__)

app = FastAPI(title="RentMatch")
app.add_exception_handler(RentMatchError, rentmatch_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# verified document type -> tenant profile flag
DOCUMENT_VERIFICATION_FLAGS = {
    "income_proof": "income_verified",
    "credit_report": "credit_score_verified",
    "rental_history": "rental_history_verified",
    "employment_proof": "employment_verified",
}


@lru_cache()
def _default_storage() -> SqliteStorage:
    return SqliteStorage(get_settings().db_path)


def get_storage() -> Storage:
    return _default_storage()


@app.on_event("startup")
def startup():
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    storage = _default_storage().init()
    logger.info(f"Database ready at {settings.db_path}")
    if settings.seed_sample_data:
        seed_sample_data(storage)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


def _invalid(message: str, outcome: ValidationFailure) -> JSONResponse:
    return JSONResponse(status_code=400, content={"message": message, "errors": outcome.errors})


# -------------------------
# Users & session
# -------------------------

@app.get("/api/users/{user_id}", response_model=UserPublic)
def get_user(user_id: int, storage: Storage = Depends(get_storage)):
    user = storage.get_user(user_id)
    if not user:
        raise NotFoundError("User not found")
    return user.public()


@app.post("/api/users", response_model=UserPublic, status_code=201)
def create_user(payload: Any = Body(None), storage: Storage = Depends(get_storage)):
    outcome = validate(UserCreate, payload)
    if isinstance(outcome, ValidationFailure):
        return _invalid("Invalid user data", outcome)
    data = outcome.value

    if storage.get_user_by_username(data.username):
        return JSONResponse(status_code=400, content={"message": "Username already exists"})
    if storage.get_user_by_email(data.email):
        return JSONResponse(status_code=400, content={"message": "Email already exists"})

    return storage.create_user(data, hash_password(data.password)).public()


@app.post("/api/login")
def login(response: Response, payload: Any = Body(None), storage: Storage = Depends(get_storage)):
    outcome = validate(LoginRequest, payload)
    if isinstance(outcome, ValidationFailure):
        return _invalid("Username and password are required", outcome)

    user = authenticate(storage, outcome.value.username, outcome.value.password)
    if not user:
        return JSONResponse(status_code=401, content={"message": "Invalid credentials"})

    token = make_session_token(user.id)
    response.set_cookie(SESSION_COOKIE, token, httponly=True)
    return {"user": user.public().model_dump(mode="json"), "token": token}


@app.post("/api/logout", status_code=204)
def logout():
    resp = Response(status_code=204)
    resp.delete_cookie(SESSION_COOKIE)
    return resp


@app.get("/api/me", response_model=UserPublic)
def me(request: Request, storage: Storage = Depends(get_storage)):
    user = get_current_user(request, storage)
    if not user:
        return JSONResponse(status_code=401, content={"message": "Not logged in"})
    return user.public()


# -------------------------
# Tenant credential profiles
# -------------------------

@app.get("/api/tenant-profiles/{user_id}", response_model=TenantProfile)
def get_tenant_profile(user_id: int, storage: Storage = Depends(get_storage)):
    profile = storage.get_tenant_profile(user_id)
    if not profile:
        raise NotFoundError("Tenant profile not found")
    return profile


@app.post("/api/tenant-profiles", response_model=TenantProfile, status_code=201)
def create_tenant_profile(payload: Any = Body(None), storage: Storage = Depends(get_storage)):
    outcome = validate(TenantProfileCreate, payload)
    if isinstance(outcome, ValidationFailure):
        return _invalid("Invalid profile data", outcome)
    data = outcome.value

    if not storage.get_user(data.user_id):
        raise NotFoundError("User not found")
    if storage.get_tenant_profile(data.user_id):
        return JSONResponse(
            status_code=400,
            content={"message": "Tenant profile already exists for this user"},
        )

    return storage.create_tenant_profile(data)


@app.patch("/api/tenant-profiles/{user_id}", response_model=TenantProfile)
def update_tenant_profile(user_id: int, payload: Any = Body(None), storage: Storage = Depends(get_storage)):
    outcome = validate(TenantProfileUpdate, payload)
    if isinstance(outcome, ValidationFailure):
        return _invalid("Invalid profile data", outcome)

    profile = storage.update_tenant_profile(user_id, outcome.value)
    if not profile:
        raise NotFoundError("Tenant profile not found")
    return profile


@app.post("/api/tenant-profiles/{user_id}/credentials")
def score_tenant_credentials(user_id: int, payload: Any = Body(None), storage: Storage = Depends(get_storage)):
    outcome = validate(TenantFinancialInputs, payload)
    if isinstance(outcome, ValidationFailure):
        return _invalid("Invalid financial data", outcome)

    if not storage.get_tenant_profile(user_id):
        raise NotFoundError("Tenant profile not found")

    report = score_credentials(**outcome.value.model_dump())
    profile = storage.update_tenant_profile(
        user_id,
        TenantProfileUpdate(
            income_score=report.income_score,
            credit_score=report.credit_score,
            rental_history_score=report.rental_history_score,
            employment_score=report.employment_score,
        ),
    )
    logger.info(f"Scored credentials for user {user_id}: overall {report.overall_score}")

    return {
        "profile": profile.model_dump(mode="json"),
        "report": CredentialScoreResponse(**vars(report)).model_dump(mode="json"),
    }


@app.post("/api/credentials/score", response_model=CredentialScoreResponse)
def score_guest_credentials(payload: Any = Body(None)):
    """
    Guest mode: score raw financial facts without storing anything.
    """
    outcome = validate(TenantFinancialInputs, payload)
    if isinstance(outcome, ValidationFailure):
        return _invalid("Invalid financial data", outcome)

    report = score_credentials(**outcome.value.model_dump())
    return CredentialScoreResponse(**vars(report))


# -------------------------
# Properties
# -------------------------

@app.get("/api/properties", response_model=List[Property])
def list_properties(
    city: Optional[str] = Query(default=None),
    state: Optional[str] = Query(default=None),
    min_price: Optional[float] = Query(default=None, ge=0),
    max_price: Optional[float] = Query(default=None, ge=0),
    bedrooms: Optional[int] = Query(default=None, ge=0),
    bathrooms: Optional[float] = Query(default=None, ge=0),
    property_type: Optional[str] = Query(default=None),
    storage: Storage = Depends(get_storage),
):
    criteria = PropertySearch(
        city=city,
        state=state,
        min_price=min_price,
        max_price=max_price,
        bedrooms=bedrooms,
        bathrooms=bathrooms,
        property_type=property_type,
    )
    return storage.search_properties(criteria)


@app.get("/api/properties/featured", response_model=List[Property])
def featured_properties(
    limit: Optional[int] = Query(default=None),
    storage: Storage = Depends(get_storage),
):
    return storage.get_featured_properties(limit)


@app.get("/api/properties/landlord/{landlord_id}", response_model=List[Property])
def landlord_properties(landlord_id: int, storage: Storage = Depends(get_storage)):
    return storage.get_properties_by_landlord(landlord_id)


@app.get("/api/properties/{property_id}", response_model=Property)
def get_property(property_id: int, storage: Storage = Depends(get_storage)):
    prop = storage.get_property(property_id)
    if not prop:
        raise NotFoundError("Property not found")
    return prop


@app.post("/api/properties", response_model=Property, status_code=201)
def create_property(payload: Any = Body(None), storage: Storage = Depends(get_storage)):
    outcome = validate(PropertyCreate, payload)
    if isinstance(outcome, ValidationFailure):
        return _invalid("Invalid property data", outcome)

    if not storage.get_user(outcome.value.landlord_id):
        raise NotFoundError("Landlord not found")

    return storage.create_property(outcome.value)


@app.patch("/api/properties/{property_id}", response_model=Property)
def update_property(property_id: int, payload: Any = Body(None), storage: Storage = Depends(get_storage)):
    outcome = validate(PropertyUpdate, payload)
    if isinstance(outcome, ValidationFailure):
        return _invalid("Invalid property data", outcome)

    prop = storage.update_property(property_id, outcome.value)
    if not prop:
        raise NotFoundError("Property not found")
    return prop


@app.delete("/api/properties/{property_id}", status_code=204)
def delete_property(property_id: int, storage: Storage = Depends(get_storage)):
    if not storage.delete_property(property_id):
        raise NotFoundError("Property not found")
    return Response(status_code=204)


# -------------------------
# Documents
# -------------------------

@app.get("/api/documents/user/{user_id}", response_model=List[Document])
def user_documents(user_id: int, storage: Storage = Depends(get_storage)):
    return storage.get_documents_by_user(user_id)


@app.post("/api/documents", response_model=Document, status_code=201)
def create_document(payload: Any = Body(None), storage: Storage = Depends(get_storage)):
    outcome = validate(DocumentCreate, payload)
    if isinstance(outcome, ValidationFailure):
        return _invalid("Invalid document data", outcome)

    if not storage.get_user(outcome.value.user_id):
        raise NotFoundError("User not found")

    return storage.create_document(outcome.value)


@app.patch("/api/documents/{document_id}/verify", response_model=Document)
def verify_document(document_id: int, storage: Storage = Depends(get_storage)):
    document = storage.verify_document(document_id)
    if not document:
        raise NotFoundError("Document not found")

    profile = storage.get_tenant_profile(document.user_id)
    if profile:
        flag = DOCUMENT_VERIFICATION_FLAGS[document.document_type]
        changes = {flag: True}
        if profile.verified_at is None:
            changes["verified_at"] = document.verified_at
        storage.update_tenant_profile(document.user_id, TenantProfileUpdate(**changes))
        logger.info(f"Document {document_id} verified; set {flag} for user {document.user_id}")

    return document


# -------------------------
# Property views / applications
# -------------------------

@app.get("/api/property-views/tenant/{tenant_id}", response_model=List[PropertyView])
def tenant_property_views(tenant_id: int, storage: Storage = Depends(get_storage)):
    return storage.get_property_views_by_tenant(tenant_id)


@app.get("/api/property-views/property/{property_id}", response_model=List[PropertyView])
def property_views(property_id: int, storage: Storage = Depends(get_storage)):
    return storage.get_property_views_by_property(property_id)


@app.post("/api/property-views", response_model=PropertyView, status_code=201)
def create_property_view(payload: Any = Body(None), storage: Storage = Depends(get_storage)):
    outcome = validate(PropertyViewCreate, payload)
    if isinstance(outcome, ValidationFailure):
        return _invalid("Invalid property view data", outcome)
    data = outcome.value

    prop = storage.get_property(data.property_id)
    if not prop:
        raise NotFoundError("Property not found")
    if not storage.get_user(data.tenant_id):
        raise NotFoundError("Tenant not found")

    match_score = data.match_score
    if match_score is None:
        # no profile yet: compute_overall_match_score answers 0
        match_score = compute_overall_match_score(storage.get_tenant_profile(data.tenant_id), prop)

    return storage.create_property_view(data, match_score)


@app.patch("/api/property-views/{view_id}", response_model=PropertyView)
def update_property_view(view_id: int, payload: Any = Body(None), storage: Storage = Depends(get_storage)):
    outcome = validate(PropertyViewUpdate, payload)
    if isinstance(outcome, ValidationFailure):
        return _invalid("Invalid property view data", outcome)

    view = storage.update_property_view(view_id, outcome.value)
    if not view:
        raise NotFoundError("Property view not found")
    return view


# -------------------------
# Matching
# -------------------------

@app.post("/api/match/tenant-properties", response_model=List[PropertyMatch])
def match_tenant_properties(payload: Any = Body(None), storage: Storage = Depends(get_storage)):
    outcome = validate(MatchRequest, payload)
    if isinstance(outcome, ValidationFailure):
        return _invalid("Tenant ID is required", outcome)

    profile = storage.get_tenant_profile(outcome.value.tenant_id)
    if not profile:
        raise NotFoundError("Tenant profile not found")

    ranked = sort_by_match_score(storage.get_all_properties(), profile)
    return [
        PropertyMatch(property=p, match_score=compute_overall_match_score(profile, p))
        for p in ranked
    ]


@app.get("/api/match/report/{tenant_id}/{property_id}", response_model=MatchResult)
def match_report(tenant_id: int, property_id: int, storage: Storage = Depends(get_storage)):
    prop = storage.get_property(property_id)
    if not prop:
        raise NotFoundError("Property not found")

    # a tenant without a profile gets the "Information unavailable" report
    return generate_match_report(storage.get_tenant_profile(tenant_id), prop)
