"""
Response mapping strategies.

Both strategies consume the same ServiceResult: the JSON strategy turns it
into an envelope with an HTTP status derived from the error code, the page
strategy into a redirect carrying a success or error marker.
"""

from typing import Optional
from urllib.parse import urlencode

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, RedirectResponse

from storefront.core.exceptions import ErrorCode
from storefront.schemas.common import ServiceResult

EXACT_STATUS = {
    ErrorCode.INVALID_CREDENTIALS.value: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.INVALID_TOKEN.value: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.NOT_AUTHORIZED.value: status.HTTP_403_FORBIDDEN,
    ErrorCode.RATE_LIMITED.value: status.HTTP_429_TOO_MANY_REQUESTS,
    ErrorCode.STORE_ERROR.value: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.INTERNAL_ERROR.value: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for_error(code: Optional[str]) -> int:
    """HTTP status for a failure envelope's error code"""
    if not code:
        return status.HTTP_400_BAD_REQUEST
    if code in EXACT_STATUS:
        return EXACT_STATUS[code]
    if code.endswith("_NOT_FOUND"):
        return status.HTTP_404_NOT_FOUND
    if code.startswith("DUPLICATE_") or code.endswith("_IN_USE"):
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


def envelope_body(result: ServiceResult) -> dict:
    body = {"success": result.success, "message": result.message}
    if result.data is not None:
        body["data"] = jsonable_encoder(result.data)
    if result.error is not None:
        body["error"] = result.error
    return body


def json_response(result: ServiceResult, success_status: int = status.HTTP_200_OK) -> JSONResponse:
    """JSON strategy"""
    status_code = success_status if result.success else status_for_error(result.error)
    return JSONResponse(status_code=status_code, content=envelope_body(result))


def error_marker(code: Optional[str]) -> str:
    """``USER_NOT_FOUND`` -> ``user_not_found``"""
    return (code or ErrorCode.INTERNAL_ERROR.value).lower()


def redirect_to(path: str, **markers) -> RedirectResponse:
    """Page strategy: redirect with query-string markers"""
    query = urlencode({key: value for key, value in markers.items() if value is not None})
    url = f"{path}?{query}" if query else path
    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)
