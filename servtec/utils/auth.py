"""
Admin route protection (X-API-Key header)
"""
from typing import List, Optional

from fastapi import Header, HTTPException, status

from servtec.config import get_settings
from servtec.utils.logger import get_logger

logger = get_logger(__name__)


def allowed_keys() -> List[str]:
    """Comma-separated ALLOWED_API_KEYS, blanks dropped"""
    return [k.strip() for k in get_settings().allowed_api_keys.split(",") if k.strip()]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


async def verify_api_key(
    x_api_key: Optional[str] = Header(None, description="Admin key for manual triggers")
) -> str:
    """
    Gate the manual reminder/summary triggers.

    The header is always required. With no keys configured any non-empty key
    is accepted outside production; in production admin routes answer 503
    until ALLOWED_API_KEYS is set.
    """
    if not x_api_key:
        logger.warning("Admin request without X-API-Key")
        raise _unauthorized("Missing API key. Provide X-API-Key header.")

    keys = allowed_keys()
    if not keys:
        if get_settings().app_env == "production":
            logger.error("Admin request rejected: ALLOWED_API_KEYS is empty in production")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Admin authentication not configured",
            )
        logger.warning("ALLOWED_API_KEYS is empty, accepting any admin key outside production")
        return x_api_key

    if x_api_key not in keys:
        logger.warning(f"Rejected admin key {x_api_key[:4]}***")
        raise _unauthorized("Invalid API key")

    return x_api_key
