# app/auth.py
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional

from fastapi import Cookie, Header, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import get_settings
from app.core.errors import AuthError, StoreError
from app.core.log import log_event
from app.db import get_user
from app.schemas import LoginForm, Redirect, safe_parse

SESSION_COOKIE = "session"
ALGORITHM = "HS256"
DEFAULT_REDIRECT = "/dashboard"
LOGIN_PATH = "/login"

# Solo paths internos: "/algo", nunca "//host" ni "https://..."
_INTERNAL_PATH_RE = re.compile(r"^/(?!/)[^\s\\]*$")

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


@dataclass(frozen=True)
class Principal:
    user_id: str
    email: Optional[str] = None


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


# -------------------------
# Session tokens (JWT)
# -------------------------

def create_session_token(user_id: str, email: Optional[str] = None) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.session_ttl_minutes)
    claims: Dict[str, Any] = {"sub": str(user_id), "exp": expire}
    if email:
        claims["email"] = email
    return jwt.encode(claims, settings.auth_secret, algorithm=ALGORITHM)


def decode_session_token(token: str) -> Optional[Dict[str, Any]]:
    try:
        return jwt.decode(token, get_settings().auth_secret, algorithms=[ALGORITHM])
    except JWTError:
        return None


def _safe_redirect_target(raw: Any) -> str:
    target = (str(raw) if raw is not None else "").strip()
    if target and _INTERNAL_PATH_RE.match(target):
        return target
    return DEFAULT_REDIRECT


# -------------------------
# Providers
# -------------------------

async def _credentials_provider(form_data: Mapping[str, Any]) -> Redirect:
    parsed = safe_parse(LoginForm, {
        "email": form_data.get("email"),
        "password": form_data.get("password"),
    })
    if not parsed.success:
        raise AuthError("CredentialsSignin")

    creds = parsed.data
    try:
        user = await run_in_threadpool(get_user, creds.email)
    except StoreError as e:
        # falla del store durante el login -> error de callback, no de credenciales
        raise AuthError("CallbackRouteError", str(e)) from e

    if not user:
        raise AuthError("CredentialsSignin")

    ok = await run_in_threadpool(verify_password, creds.password, user["password"])
    if not ok:
        raise AuthError("CredentialsSignin")

    token = create_session_token(user["id"], user["email"])
    log_event("sign_in", user_id=user["id"])
    return Redirect(
        to=_safe_redirect_target(form_data.get("redirectTo")),
        cookies={SESSION_COOKIE: token},
    )


_PROVIDERS = {
    "credentials": _credentials_provider,
}


async def sign_in(provider: str, form_data: Mapping[str, Any]) -> Redirect:
    """
    Verifica credenciales y abre sesión.
    Éxito -> Redirect con la cookie de sesión.
    Falla -> AuthError con `type` (ej: "CredentialsSignin").
    """
    handler = _PROVIDERS.get(provider)
    if handler is None:
        raise AuthError("InvalidProvider", f"Unknown provider: {provider}")
    return await handler(form_data)


def sign_out() -> Redirect:
    return Redirect(to=LOGIN_PATH, clear_cookies=(SESSION_COOKIE,))


# -------------------------
# Dependency: protege /dashboard/*
# -------------------------

def _token_from_headers(session: Optional[str], authorization: Optional[str]) -> Optional[str]:
    if session:
        return session.strip()
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return None


async def require_session(
    session: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE),
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> Principal:
    token = _token_from_headers(session, authorization)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not signed in",
        )

    claims = decode_session_token(token)
    if not claims or not claims.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session",
        )

    return Principal(user_id=str(claims["sub"]), email=claims.get("email"))
