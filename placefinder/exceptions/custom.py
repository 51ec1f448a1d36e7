class GooglePlacesError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class PlacesDecodeError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ReverseGeocodeError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class LocationPermissionError(Exception):
    def __init__(self, authorization: str):
        self.authorization = authorization
        super().__init__(f"Location access not authorized ({authorization})")


class RateLimitError(Exception):
    def __init__(self, service: str):
        self.service = service
        super().__init__(f"Rate limit exceeded for {service}")
