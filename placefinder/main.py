import logging
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from placefinder.config import Settings
from placefinder.exceptions.custom import LocationPermissionError
from placefinder.exceptions.handlers import location_permission_error_handler
from placefinder.routers.location import router as location_router
from placefinder.routers.search import router as search_router
from placefinder.services.coordinator import SearchCoordinator
from placefinder.services.device_location import DeviceLocationService
from placefinder.services.geocoding import NominatimGeocoder
from placefinder.services.place_search import PlaceSearchClient
from placefinder.services.position_provider import PositionProvider


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
        device_location = DeviceLocationService()
        geocoder = NominatimGeocoder(
            client,
            user_agent=settings.nominatim_user_agent,
            base_url=settings.nominatim_url,
        )
        position_provider = PositionProvider(
            device_location, geocoder, auto_start=settings.auto_start_locating
        )
        search_client = PlaceSearchClient(
            client, settings.google_places_api_key, radius_m=settings.search_radius_m
        )
        coordinator = SearchCoordinator(
            search_client,
            position_provider,
            debounce_seconds=settings.debounce_ms / 1000,
            min_query_length=settings.min_query_length,
        )

        app.state.device_location = device_location
        app.state.position_provider = position_provider
        app.state.coordinator = coordinator

        try:
            yield
        finally:
            await coordinator.aclose()
            await position_provider.aclose()


app = FastAPI(title="Placefinder", lifespan=lifespan)

app.add_exception_handler(LocationPermissionError, location_permission_error_handler)

app.include_router(location_router)
app.include_router(search_router)
