"""FastAPI dependencies for admin authentication."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Header, HTTPException

from food_delivery_service.auth.api_key_validator import APIKeyValidator


def check_api_key(x_api_key: str | None, validator: APIKeyValidator) -> str:
    """Validate the X-API-Key header value.

    Args:
        x_api_key: API key from the X-API-Key header
        validator: Validator holding the accepted keys

    Returns:
        str: The validated API key

    Raises:
        HTTPException: 401 if the API key is missing or invalid
    """
    if not x_api_key:
        raise HTTPException(status_code=401, detail="Missing API key")

    if not validator.validate(x_api_key):
        raise HTTPException(status_code=401, detail="Invalid API key")

    return x_api_key


def require_api_key(validator: APIKeyValidator) -> Callable[..., str]:
    """Build a FastAPI dependency that enforces a valid X-API-Key header.

    Example:
        admin_key = require_api_key(APIKeyValidator(["secret"]))

        @app.get("/admin/thing", dependencies=[Depends(admin_key)])
        async def thing() -> ...: ...
    """

    def dependency(x_api_key: Annotated[str | None, Header()] = None) -> str:
        return check_api_key(x_api_key, validator)

    return dependency
