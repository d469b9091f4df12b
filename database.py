import logging
import sqlite3
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def get_conn(db_path: PathLike):
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def _col_exists(conn, table: str, col: str) -> bool:
    cols = conn.execute(f"PRAGMA table_info({table})").fetchall()
    return any(c["name"] == col for c in cols)


def migrate_db(conn):
    """
    Applies migrations safely for existing DBs.
    """
    # ---- tenant_profiles migrations ----
    if not _col_exists(conn, "tenant_profiles", "created_at"):
        conn.execute("ALTER TABLE tenant_profiles ADD COLUMN created_at TEXT")
        conn.execute("UPDATE tenant_profiles SET created_at = updated_at WHERE created_at IS NULL")
        conn.commit()
        logger.info("Added tenant_profiles.created_at")

    # ---- properties migrations ----
    if not _col_exists(conn, "properties", "images_json"):
        conn.execute("ALTER TABLE properties ADD COLUMN images_json TEXT NOT NULL DEFAULT '[]'")
        conn.commit()
        logger.info("Added properties.images_json")


def init_db(db_path: PathLike):
    conn = get_conn(db_path)
    cur = conn.cursor()

    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT UNIQUE NOT NULL,
            password_hash TEXT NOT NULL,
            email TEXT UNIQUE NOT NULL,
            full_name TEXT NOT NULL,
            user_type TEXT NOT NULL,
            phone TEXT,
            profile_picture TEXT,
            created_at TEXT NOT NULL
        )
        """
    )

    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS tenant_profiles (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER UNIQUE NOT NULL,
            income_verified INTEGER NOT NULL DEFAULT 0,
            credit_score_verified INTEGER NOT NULL DEFAULT 0,
            rental_history_verified INTEGER NOT NULL DEFAULT 0,
            employment_verified INTEGER NOT NULL DEFAULT 0,
            income_score INTEGER,
            credit_score INTEGER,
            rental_history_score INTEGER,
            employment_score INTEGER,
            overall_score INTEGER,
            verification_badge INTEGER NOT NULL DEFAULT 0,
            verified_at TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY(user_id) REFERENCES users(id)
        )
        """
    )

    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS properties (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            landlord_id INTEGER NOT NULL,
            title TEXT NOT NULL,
            description TEXT NOT NULL,
            address TEXT NOT NULL,
            city TEXT NOT NULL,
            state TEXT NOT NULL,
            zip_code TEXT NOT NULL,
            price_per_month REAL NOT NULL,
            bedrooms INTEGER NOT NULL,
            bathrooms REAL NOT NULL,
            square_feet INTEGER NOT NULL,
            property_type TEXT NOT NULL,
            available_from TEXT NOT NULL,
            featured INTEGER NOT NULL DEFAULT 0,
            images_json TEXT NOT NULL DEFAULT '[]',
            minimum_income REAL,
            minimum_credit_score INTEGER,
            required_rental_history INTEGER,
            required_employment_stability INTEGER,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            FOREIGN KEY(landlord_id) REFERENCES users(id)
        )
        """
    )

    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS documents (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL,
            document_type TEXT NOT NULL,
            file_name TEXT NOT NULL,
            file_url TEXT NOT NULL,
            verified INTEGER NOT NULL DEFAULT 0,
            verified_at TEXT,
            uploaded_at TEXT NOT NULL,
            FOREIGN KEY(user_id) REFERENCES users(id)
        )
        """
    )

    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS property_views (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            property_id INTEGER NOT NULL,
            tenant_id INTEGER NOT NULL,
            match_score INTEGER NOT NULL,
            application_status TEXT NOT NULL DEFAULT 'pending',
            viewing_date TEXT,
            notes TEXT,
            created_at TEXT NOT NULL,
            FOREIGN KEY(property_id) REFERENCES properties(id) ON DELETE CASCADE,
            FOREIGN KEY(tenant_id) REFERENCES users(id)
        )
        """
    )

    conn.commit()

    #  apply migrations AFTER base tables exist
    migrate_db(conn)

    conn.close()
