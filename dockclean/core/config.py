from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DOCKER_API_VERSION: str = Field(
        default="auto",
        description="Docker API version; 'auto' negotiates with the daemon at connect time"
    )

    DOCKER_TIMEOUT: int = Field(
        default=60,
        description="Seconds to wait for a single Docker API call"
    )

    FORCE_REMOVE: bool = True  # same as `docker rmi -f` / `docker rm -f`

    MAX_CONCURRENT_REMOVALS: int = Field(
        default=8,
        ge=1,
        description="Worker pool size for concurrent image removal"
    )

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="DOCKCLEAN_",
        env_file=".env",
        extra="ignore",
    )
