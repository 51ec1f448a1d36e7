from typing import Annotated

from fastapi import Depends, Request

from placefinder.services.coordinator import SearchCoordinator
from placefinder.services.device_location import DeviceLocationService
from placefinder.services.position_provider import PositionProvider


def get_device_location(request: Request) -> DeviceLocationService:
    return request.app.state.device_location


def get_position_provider(request: Request) -> PositionProvider:
    return request.app.state.position_provider


def get_coordinator(request: Request) -> SearchCoordinator:
    return request.app.state.coordinator


DeviceLocationDep = Annotated[DeviceLocationService, Depends(get_device_location)]
PositionProviderDep = Annotated[PositionProvider, Depends(get_position_provider)]
CoordinatorDep = Annotated[SearchCoordinator, Depends(get_coordinator)]
