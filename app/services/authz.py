from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session as DbSession

from app.database import get_db
from app.models.job import Job
from app.models.session import UserSession
from app.models.user import User
from app.services.sessions import COOKIE_NAME
from app.services.tokens import as_aware, hash_token, utcnow

def session_for_token(db: DbSession, raw: str) -> UserSession | None:
    sess = (
        db.query(UserSession)
        .filter(UserSession.token_hash == hash_token(raw), UserSession.revoked_at.is_(None))
        .first()
    )
    if not sess or as_aware(sess.expires_at) < utcnow():
        return None
    return sess

def current_user(req: Request, db: DbSession = Depends(get_db)) -> User:
    """Session collaborator: resolves the cookie to an active user or answers 401."""
    raw = req.cookies.get(COOKIE_NAME)
    if not raw:
        raise HTTPException(status_code=401, detail="Unauthorized")

    sess = session_for_token(db, raw)
    if not sess:
        raise HTTPException(status_code=401, detail="Session expired")

    user = db.get(User, sess.user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user

def require_admin(user: User = Depends(current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Forbidden")
    return user

def ensure_owner(job: Job, user: User) -> None:
    # owners only, whatever the role
    if job.user_id != user.id:
        raise HTTPException(status_code=403, detail="Forbidden")
