from typing import Optional

from fastapi import Request
from itsdangerous import BadData, URLSafeTimedSerializer
from passlib.context import CryptContext

from config import get_settings
from schemas import User
from storage import Storage

SESSION_COOKIE = "session_token"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(get_settings().secret_key, salt="rentmatch-session")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def authenticate(storage: Storage, username: str, password: str) -> Optional[User]:
    user = storage.get_user_by_username(username)
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


def make_session_token(user_id: int) -> str:
    return _serializer().dumps({"user_id": user_id})


def read_session_token(token: str, max_age_seconds: Optional[int] = None):
    if max_age_seconds is None:
        max_age_seconds = get_settings().session_max_age
    try:
        return _serializer().loads(token, max_age=max_age_seconds)
    except BadData:
        return None


def _request_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip()
    return request.cookies.get(SESSION_COOKIE)


def get_current_user(request: Request, storage: Storage) -> Optional[User]:
    token = _request_token(request)
    if not token:
        return None

    data = read_session_token(token)
    if not data:
        return None

    return storage.get_user(data["user_id"])
