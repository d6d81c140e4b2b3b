"""Function key authentication."""

from typing import Optional

from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader, APIKeyQuery

from .config import settings

# Function keys are accepted in a header or in the ``code`` query parameter
function_key_header = APIKeyHeader(name="x-functions-key", auto_error=False)
function_key_query = APIKeyQuery(name="code", auto_error=False)


async def verify_function_key(
    header_key: Optional[str] = Security(function_key_header),
    query_key: Optional[str] = Security(function_key_query),
) -> str:
    """Verify that the provided function key is valid.

    Args:
        header_key: Key from the x-functions-key header
        query_key: Key from the ``code`` query parameter

    Returns:
        The validated key

    Raises:
        HTTPException: 401 if key is missing or invalid
    """
    valid_keys = settings.get_valid_function_keys()

    if not valid_keys:
        # Development mode: no keys configured, allow all requests
        return "dev_mode"

    key = header_key or query_key
    if not key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing function key. Provide x-functions-key header or code parameter.",
        )

    if key not in valid_keys:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid function key",
        )

    return key
