from placefinder.schemas.search import ErrorKind

_MESSAGES = {
    ErrorKind.permission_denied: "Turn on location access to search nearby places.",
    ErrorKind.position_unavailable: "We couldn't find your location. Try again.",
    ErrorKind.network_failure: "Search is unavailable right now. Try again.",
    ErrorKind.decode_failure: "Something went wrong loading results. Try again.",
    ErrorKind.empty_result: "No places found nearby.",
}


def describe_error(error: ErrorKind | None) -> str | None:
    """Short generic message for display; never includes upstream details."""
    if error is None:
        return None
    return _MESSAGES[error]
