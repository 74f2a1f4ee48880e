from fastapi import HTTPException, status, Header
from app.config import get_settings

async def verify_api_key(authorization: str = Header(...)):
    settings = get_settings()
    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication scheme"
        )

    token = authorization.split("Bearer ")[1].strip()
    if not settings.api_key or token != settings.api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API token"
        )

    return token
