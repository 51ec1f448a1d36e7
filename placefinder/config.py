from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    google_places_api_key: str
    search_radius_m: int = 5000
    debounce_ms: int = 400
    min_query_length: int = 2
    http_timeout: float = 10.0
    nominatim_url: str = "https://nominatim.openstreetmap.org/reverse"
    nominatim_user_agent: str = "placefinder/0.1"
    auto_start_locating: bool = True
    log_level: str = "INFO"
