from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Upstream digital-twin service root, e.g. "http://localhost:8000". Unset = not configured.
    api_base_url: str | None = None
    default_goal: str = "Strength"
    request_timeout_s: float = 10.0

    log_level: str = "INFO"
    log_json: bool = False

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
