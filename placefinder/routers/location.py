import logging
from datetime import datetime

from fastapi import APIRouter
from pydantic import BaseModel, Field

from placefinder.dependencies import DeviceLocationDep, PositionProviderDep
from placefinder.exceptions.custom import LocationPermissionError
from placefinder.schemas.location import AuthorizationStatus
from placefinder.schemas.responses import LocationStatusResponse
from placefinder.services.device_location import DeviceLocationService
from placefinder.services.position_provider import PositionProvider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/location", tags=["location"])


class AuthorizationReport(BaseModel):
    status: AuthorizationStatus


class PositionReport(BaseModel):
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    timestamp: datetime | None = None


class LocationErrorReport(BaseModel):
    reason: str = "unknown"


def _status(provider: PositionProvider, device: DeviceLocationService) -> LocationStatusResponse:
    return LocationStatusResponse(
        authorization=provider.current_authorization(),
        prompt_pending=device.prompt_pending,
        state=provider.state.value,
    )


@router.get("", response_model=LocationStatusResponse)
async def get_location(
    provider: PositionProviderDep, device: DeviceLocationDep
) -> LocationStatusResponse:
    return _status(provider, device)


@router.post("/permission", response_model=LocationStatusResponse)
async def request_permission(
    provider: PositionProviderDep, device: DeviceLocationDep
) -> LocationStatusResponse:
    provider.request_permission()
    return _status(provider, device)


@router.post("/authorization", response_model=LocationStatusResponse)
async def report_authorization(
    report: AuthorizationReport, provider: PositionProviderDep, device: DeviceLocationDep
) -> LocationStatusResponse:
    device.report_authorization(report.status)
    return _status(provider, device)


@router.post("/start", response_model=LocationStatusResponse)
async def start_locating(
    provider: PositionProviderDep, device: DeviceLocationDep
) -> LocationStatusResponse:
    authorization = provider.current_authorization()
    if not authorization.is_authorized:
        raise LocationPermissionError(authorization)
    provider.start_locating()
    return _status(provider, device)


@router.post("/fix", response_model=LocationStatusResponse)
async def report_fix(
    report: PositionReport, provider: PositionProviderDep, device: DeviceLocationDep
) -> LocationStatusResponse:
    device.report_position(report.latitude, report.longitude, timestamp=report.timestamp)
    return _status(provider, device)


@router.post("/error", response_model=LocationStatusResponse)
async def report_error(
    report: LocationErrorReport, provider: PositionProviderDep, device: DeviceLocationDep
) -> LocationStatusResponse:
    device.report_error(report.reason)
    return _status(provider, device)
