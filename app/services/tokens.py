import hashlib
import secrets
from datetime import datetime, timezone

def new_token() -> str:
    return secrets.token_urlsafe(32)

def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def as_aware(dt: datetime) -> datetime:
    # sqlite hands back naive datetimes; they were written as UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt
def utcnow_naive() -> datetime:
    # job and user timestamps are stored as naive UTC
    return utcnow().replace(tzinfo=None)
