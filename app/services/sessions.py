from fastapi import Response

from app.config import IS_PROD

COOKIE_NAME = "nv_session"
SESSION_DAYS = 7

def set_session_cookie(resp: Response, token: str, minutes: int = 60 * 24 * SESSION_DAYS):
    resp.set_cookie(
        key=COOKIE_NAME,
        value=token,
        httponly=True,
        secure=IS_PROD,              # True in prod (HTTPS)
        samesite="lax",
        max_age=minutes * 60,
        path="/",
    )

def clear_session_cookie(resp: Response):
    resp.delete_cookie(COOKIE_NAME, path="/")
