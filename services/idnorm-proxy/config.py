"""Environment-based configuration for the idnorm proxy."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Proxy settings, loaded from environment variables."""

    # Server
    PORT: int = 4000
    CORS_ALLOW_ORIGINS: list[str] = ["*"]

    # Extraction API connection (empty = extraction disabled, local dev default)
    IDEX_SERVER_URL: str = ""
    IDNORM_LICENSE_KEY: str = ""

    # Extraction API timeouts
    IDEX_TIMEOUT_SECONDS: int = 60
    IDEX_CONNECT_TIMEOUT: int = 10

    # Uploaded images are re-encoded as JPEG and shrunk until they fit
    MAX_IMAGE_BYTES: int = 512 * 1024
    JPEG_QUALITY: int = 90

    model_config = {"env_prefix": "", "case_sensitive": True}


settings = Settings()
