from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = "mongodb://localhost:27017/chatrelay"
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 3000
    debug: bool = False
    jwt_secret: str
    token_ttl_days: int = 30
    cors_origins: list[str] = ["*"]
    public_url: str = "http://localhost:3000"  # Base URL used to build links to uploaded files
    uploads_path: str = "uploads"  # Directory path for storing uploaded files
    max_upload_size: int = 25 * 1024 * 1024
    # Disconnect the previous connection when a user connects from a second client
    evict_stale_sessions: bool = True

    model_config = {
        "env_file": [".env"],
        "env_prefix": "CHATRELAY_",
        "extra": "ignore",
    }
