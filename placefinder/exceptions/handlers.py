import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from .custom import LocationPermissionError

logger = logging.getLogger(__name__)


async def location_permission_error_handler(
    _request: Request, exc: LocationPermissionError
) -> JSONResponse:
    logger.warning("Location request rejected: authorization=%s", exc.authorization)
    return JSONResponse(
        status_code=403,
        content={"detail": "Location access is not enabled for this app."},
    )
