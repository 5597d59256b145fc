from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.orm import Session as DbSession

from app.database import get_db
from app.models.session import UserSession
from app.models.user import User
from app.services.authz import current_user, session_for_token
from app.services.passwords import verify_password
from app.services.sessions import COOKIE_NAME, SESSION_DAYS, clear_session_cookie, set_session_cookie
from app.services.tokens import hash_token, new_token, utcnow

router = APIRouter(prefix="/auth", tags=["auth"])

class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


@router.post("/login")
def login(payload: LoginIn, req: Request, resp: Response, db: DbSession = Depends(get_db)):
    email = payload.email.lower().strip()
    user = db.query(User).filter(User.email == email).first()

    if not user or not user.is_active or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = new_token()
    sess = UserSession(
        user_id=user.id,
        token_hash=hash_token(token),
        expires_at=utcnow() + timedelta(days=SESSION_DAYS),
        revoked_at=None,
        user_agent=req.headers.get("user-agent"),
        ip_address=req.client.host if req.client else None,
    )
    db.add(sess)
    db.commit()

    set_session_cookie(resp, token)
    return {"ok": True}

@router.post("/logout")
def logout(req: Request, resp: Response, db: DbSession = Depends(get_db)):
    raw = req.cookies.get(COOKIE_NAME)
    if raw:
        sess = session_for_token(db, raw)
        if sess:
            sess.revoked_at = utcnow()
            db.commit()
    clear_session_cookie(resp)
    return {"ok": True}

@router.get("/me")
def me(user: User = Depends(current_user)):
    return {"userId": str(user.id), "email": user.email, "role": user.role}
