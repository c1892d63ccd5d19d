from typing import NamedTuple

from fastapi import Request, Depends, HTTPException

from app.auth.models import Role, Level
from app.core.security import decode_access_token


class Identity(NamedTuple):
    """Verified caller, passed explicitly into every service call."""
    user_id: int
    username: str
    role: str
    level: str


def _extract_token(request: Request):
    auth_header = request.headers.get("authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip()

    token = request.cookies.get("access_token")
    # Support both "Bearer <token>" and raw cookie values.
    if token and token.lower().startswith("bearer "):
        token = token[7:].strip()
    return token


def get_identity(request: Request) -> Identity:
    token = _extract_token(request)
    if not token:
        print(f"[AUTH] reject reason=missing_token path={request.url.path}", flush=True)
        raise HTTPException(status_code=401, detail="Not authenticated")

    payload = decode_access_token(token)
    if not payload:
        print(f"[AUTH] reject reason=invalid_token path={request.url.path}", flush=True)
        raise HTTPException(status_code=401, detail="Invalid token")

    user_id = payload.get("userId")
    username = payload.get("sub")
    if not isinstance(user_id, int) or not username:
        print(f"[AUTH] reject reason=bad_payload path={request.url.path}", flush=True)
        raise HTTPException(status_code=401, detail="Invalid token payload")

    return Identity(
        user_id=user_id,
        username=username,
        role=payload.get("role") or Role.STUDENT.value,
        level=payload.get("level") or Level.BEGINNER.value,
    )


def require_admin(identity: Identity = Depends(get_identity)) -> Identity:
    """Dependency to ensure the caller holds the ADMIN role."""
    if identity.role != Role.ADMIN.value:
        raise HTTPException(status_code=403, detail="Admin access required")
    return identity
