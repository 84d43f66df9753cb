from fastapi import Request, HTTPException, status
from jose import jwt, JWTError

from wellnest.config import IDENTITY_JWT_SECRET, IDENTITY_JWT_ALGORITHM, IDENTITY_JWT_AUDIENCE


def verify_token(token: str) -> dict | None:
    """Decode and verify an identity-provider JWT. Returns the payload or None on failure."""
    try:
        return jwt.decode(
            token,
            IDENTITY_JWT_SECRET,
            algorithms=[IDENTITY_JWT_ALGORITHM],
            audience=IDENTITY_JWT_AUDIENCE,
            options={"verify_aud": IDENTITY_JWT_AUDIENCE is not None},
        )
    except JWTError:
        return None


async def get_current_user(request: Request) -> str:
    """
    FastAPI dependency — extracts the Bearer token from the Authorization
    header, verifies it, and returns the opaque user_id (the ``sub`` claim).
    Raises HTTP 401 if the token is missing or invalid.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid Authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = auth_header.split(" ", 1)[1]
    payload = verify_token(token)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token payload missing required claims",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return str(user_id)
