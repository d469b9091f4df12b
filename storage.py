"""
Storage interface and its SQLite implementation.

Handlers never touch the database directly: they receive a ``Storage`` through
``Depends(get_storage)`` and call the operations below. Ids are assigned by the
database.
"""

import json
import logging
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

from database import PathLike, get_conn, init_db
from exceptions import ConflictError
from schemas import (
    Document,
    DocumentCreate,
    Property,
    PropertyCreate,
    PropertySearch,
    PropertyUpdate,
    PropertyView,
    PropertyViewCreate,
    PropertyViewUpdate,
    TenantProfile,
    TenantProfileCreate,
    TenantProfileUpdate,
    User,
    UserCreate,
)
from scoring import derive_profile_fields

logger = logging.getLogger(__name__)


class Storage(ABC):
    # users
    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]: ...

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]: ...

    @abstractmethod
    def create_user(self, data: UserCreate, password_hash: str) -> User: ...

    # tenant profiles
    @abstractmethod
    def get_tenant_profile(self, user_id: int) -> Optional[TenantProfile]: ...

    @abstractmethod
    def create_tenant_profile(self, data: TenantProfileCreate) -> TenantProfile: ...

    @abstractmethod
    def update_tenant_profile(self, user_id: int, update: TenantProfileUpdate) -> Optional[TenantProfile]: ...

    # properties
    @abstractmethod
    def get_property(self, property_id: int) -> Optional[Property]: ...

    @abstractmethod
    def get_all_properties(self) -> List[Property]: ...

    @abstractmethod
    def get_properties_by_landlord(self, landlord_id: int) -> List[Property]: ...

    @abstractmethod
    def get_featured_properties(self, limit: Optional[int] = None) -> List[Property]: ...

    @abstractmethod
    def search_properties(self, criteria: PropertySearch) -> List[Property]: ...

    @abstractmethod
    def create_property(self, data: PropertyCreate) -> Property: ...

    @abstractmethod
    def update_property(self, property_id: int, update: PropertyUpdate) -> Optional[Property]: ...

    @abstractmethod
    def delete_property(self, property_id: int) -> bool: ...

    # documents
    @abstractmethod
    def get_document(self, document_id: int) -> Optional[Document]: ...

    @abstractmethod
    def get_documents_by_user(self, user_id: int) -> List[Document]: ...

    @abstractmethod
    def create_document(self, data: DocumentCreate) -> Document: ...

    @abstractmethod
    def verify_document(self, document_id: int) -> Optional[Document]: ...

    # property views / applications
    @abstractmethod
    def get_property_view(self, view_id: int) -> Optional[PropertyView]: ...

    @abstractmethod
    def get_property_views_by_tenant(self, tenant_id: int) -> List[PropertyView]: ...

    @abstractmethod
    def get_property_views_by_property(self, property_id: int) -> List[PropertyView]: ...

    @abstractmethod
    def create_property_view(self, data: PropertyViewCreate, match_score: int) -> PropertyView: ...

    @abstractmethod
    def update_property_view(self, view_id: int, update: PropertyViewUpdate) -> Optional[PropertyView]: ...


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_db(value: Any) -> Any:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _property_from_row(row) -> Property:
    data = dict(row)
    data["images"] = json.loads(data.pop("images_json") or "[]")
    return Property(**data)


class SqliteStorage(Storage):
    def __init__(self, db_path: PathLike):
        self.db_path = db_path

    def init(self) -> "SqliteStorage":
        init_db(self.db_path)
        return self

    @contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        conn = get_conn(self.db_path)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _insert(self, table: str, values: Dict[str, Any]) -> int:
        cols = ", ".join(values)
        marks = ", ".join("?" for _ in values)
        with self._conn() as conn:
            cur = conn.execute(
                f"INSERT INTO {table} ({cols}) VALUES ({marks})",
                [_to_db(v) for v in values.values()],
            )
            return cur.lastrowid

    @staticmethod
    def _execute_update(conn: sqlite3.Connection, table: str, row_id: int, values: Dict[str, Any]) -> None:
        assignments = ", ".join(f"{col} = ?" for col in values)
        conn.execute(
            f"UPDATE {table} SET {assignments} WHERE id = ?",
            [_to_db(v) for v in values.values()] + [row_id],
        )

    def _update(self, table: str, row_id: int, values: Dict[str, Any]) -> None:
        if not values:
            return
        with self._conn() as conn:
            self._execute_update(conn, table, row_id, values)

    def _fetch_one(self, sql: str, params=()):
        with self._conn() as conn:
            return conn.execute(sql, params).fetchone()

    def _fetch_all(self, sql: str, params=()):
        with self._conn() as conn:
            return conn.execute(sql, params).fetchall()

    # ---- users ----

    def get_user(self, user_id: int) -> Optional[User]:
        row = self._fetch_one("SELECT * FROM users WHERE id = ?", (user_id,))
        return User(**dict(row)) if row else None

    def get_user_by_username(self, username: str) -> Optional[User]:
        row = self._fetch_one("SELECT * FROM users WHERE username = ?", (username.strip(),))
        return User(**dict(row)) if row else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        row = self._fetch_one("SELECT * FROM users WHERE email = ?", (email.lower().strip(),))
        return User(**dict(row)) if row else None

    def create_user(self, data: UserCreate, password_hash: str) -> User:
        values = data.model_dump(exclude={"password"})
        values["username"] = values["username"].strip()
        values["email"] = values["email"].lower().strip()
        values["password_hash"] = password_hash
        values["created_at"] = _now()
        try:
            user_id = self._insert("users", values)
        except sqlite3.IntegrityError as e:
            raise ConflictError("Username or email already exists") from e
        logger.info(f"Created user {user_id} ({values['user_type']})")
        return self.get_user(user_id)

    # ---- tenant profiles ----

    def get_tenant_profile(self, user_id: int) -> Optional[TenantProfile]:
        row = self._fetch_one("SELECT * FROM tenant_profiles WHERE user_id = ?", (user_id,))
        return TenantProfile(**dict(row)) if row else None

    def create_tenant_profile(self, data: TenantProfileCreate) -> TenantProfile:
        values = data.model_dump()
        values.update(derive_profile_fields(**_profile_inputs(values)))
        values["created_at"] = values["updated_at"] = _now()
        try:
            self._insert("tenant_profiles", values)
        except sqlite3.IntegrityError as e:
            raise ConflictError("Tenant profile already exists for this user") from e
        logger.info(f"Created tenant profile for user {data.user_id}")
        return self.get_tenant_profile(data.user_id)

    def update_tenant_profile(self, user_id: int, update: TenantProfileUpdate) -> Optional[TenantProfile]:
        changes = update.changes()
        with self._conn() as conn:
            # hold the write lock across read, merge and write
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute("SELECT * FROM tenant_profiles WHERE user_id = ?", (user_id,)).fetchone()
            if not row:
                return None

            merged = dict(row)
            merged.update(changes)
            changes.update(derive_profile_fields(**_profile_inputs(merged)))
            changes["updated_at"] = _now()
            self._execute_update(conn, "tenant_profiles", row["id"], changes)

        return self.get_tenant_profile(user_id)

    # ---- properties ----

    def get_property(self, property_id: int) -> Optional[Property]:
        row = self._fetch_one("SELECT * FROM properties WHERE id = ?", (property_id,))
        return _property_from_row(row) if row else None

    def get_all_properties(self) -> List[Property]:
        rows = self._fetch_all("SELECT * FROM properties ORDER BY id")
        return [_property_from_row(r) for r in rows]

    def get_properties_by_landlord(self, landlord_id: int) -> List[Property]:
        rows = self._fetch_all(
            "SELECT * FROM properties WHERE landlord_id = ? ORDER BY id",
            (landlord_id,),
        )
        return [_property_from_row(r) for r in rows]

    def get_featured_properties(self, limit: Optional[int] = None) -> List[Property]:
        sql = "SELECT * FROM properties WHERE featured = 1 ORDER BY id"
        params: tuple = ()
        if limit and limit > 0:
            sql += " LIMIT ?"
            params = (limit,)
        return [_property_from_row(r) for r in self._fetch_all(sql, params)]

    def search_properties(self, criteria: PropertySearch) -> List[Property]:
        clauses: List[str] = []
        params: List[Any] = []

        if criteria.city:
            clauses.append("LOWER(city) LIKE ?")
            params.append(f"%{criteria.city.lower().strip()}%")
        if criteria.state:
            clauses.append("LOWER(state) = ?")
            params.append(criteria.state.lower().strip())
        if criteria.min_price is not None:
            clauses.append("price_per_month >= ?")
            params.append(criteria.min_price)
        if criteria.max_price is not None:
            clauses.append("price_per_month <= ?")
            params.append(criteria.max_price)
        if criteria.bedrooms is not None:
            clauses.append("bedrooms >= ?")
            params.append(criteria.bedrooms)
        if criteria.bathrooms is not None:
            clauses.append("bathrooms >= ?")
            params.append(criteria.bathrooms)
        if criteria.property_type:
            clauses.append("LOWER(property_type) = ?")
            params.append(criteria.property_type.lower().strip())

        sql = "SELECT * FROM properties"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY id"
        return [_property_from_row(r) for r in self._fetch_all(sql, params)]

    def create_property(self, data: PropertyCreate) -> Property:
        values = data.model_dump()
        values["images_json"] = json.dumps(values.pop("images"))
        values["created_at"] = values["updated_at"] = _now()
        property_id = self._insert("properties", values)
        logger.info(f"Created property {property_id} for landlord {data.landlord_id}")
        return self.get_property(property_id)

    def update_property(self, property_id: int, update: PropertyUpdate) -> Optional[Property]:
        if not self.get_property(property_id):
            return None

        changes = update.changes()
        if "images" in changes:
            changes["images_json"] = json.dumps(changes.pop("images") or [])
        changes["updated_at"] = _now()

        self._update("properties", property_id, changes)
        return self.get_property(property_id)

    def delete_property(self, property_id: int) -> bool:
        with self._conn() as conn:
            cur = conn.execute("DELETE FROM properties WHERE id = ?", (property_id,))
            deleted = cur.rowcount > 0
        if deleted:
            logger.info(f"Deleted property {property_id}")
        return deleted

    # ---- documents ----

    def get_document(self, document_id: int) -> Optional[Document]:
        row = self._fetch_one("SELECT * FROM documents WHERE id = ?", (document_id,))
        return Document(**dict(row)) if row else None

    def get_documents_by_user(self, user_id: int) -> List[Document]:
        rows = self._fetch_all("SELECT * FROM documents WHERE user_id = ? ORDER BY id", (user_id,))
        return [Document(**dict(r)) for r in rows]

    def create_document(self, data: DocumentCreate) -> Document:
        values = data.model_dump()
        values["verified"] = False
        values["uploaded_at"] = _now()
        document_id = self._insert("documents", values)
        return self.get_document(document_id)

    def verify_document(self, document_id: int) -> Optional[Document]:
        if not self.get_document(document_id):
            return None
        self._update("documents", document_id, {"verified": True, "verified_at": _now()})
        return self.get_document(document_id)

    # ---- property views ----

    def get_property_view(self, view_id: int) -> Optional[PropertyView]:
        row = self._fetch_one("SELECT * FROM property_views WHERE id = ?", (view_id,))
        return PropertyView(**dict(row)) if row else None

    def get_property_views_by_tenant(self, tenant_id: int) -> List[PropertyView]:
        rows = self._fetch_all(
            "SELECT * FROM property_views WHERE tenant_id = ? ORDER BY id",
            (tenant_id,),
        )
        return [PropertyView(**dict(r)) for r in rows]

    def get_property_views_by_property(self, property_id: int) -> List[PropertyView]:
        rows = self._fetch_all(
            "SELECT * FROM property_views WHERE property_id = ? ORDER BY id",
            (property_id,),
        )
        return [PropertyView(**dict(r)) for r in rows]

    def create_property_view(self, data: PropertyViewCreate, match_score: int) -> PropertyView:
        values = data.model_dump()
        values["match_score"] = match_score
        values["created_at"] = _now()
        view_id = self._insert("property_views", values)
        return self.get_property_view(view_id)

    def update_property_view(self, view_id: int, update: PropertyViewUpdate) -> Optional[PropertyView]:
        if not self.get_property_view(view_id):
            return None
        self._update("property_views", view_id, update.changes())
        return self.get_property_view(view_id)


def _profile_inputs(values: Dict[str, Any]) -> Dict[str, Any]:
    keys = (
        "income_score",
        "credit_score",
        "rental_history_score",
        "employment_score",
        "income_verified",
        "credit_score_verified",
        "rental_history_verified",
        "employment_verified",
    )
    return {k: values[k] for k in keys}
