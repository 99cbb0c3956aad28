from fastapi import Header, HTTPException, Query

from motionlog.core.config import settings


def _verify_api_key(x_api_key: str) -> None:
    if not x_api_key or x_api_key != settings.api_key:
        raise HTTPException(status_code=401, detail="Invalid API key")


def verify_api_key(x_api_key: str = Header(default=""), api_key: str = Query(default="")) -> None:
    _verify_api_key(x_api_key or api_key)
