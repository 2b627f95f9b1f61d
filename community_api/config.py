from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Comment storage backend: "remote" (record client) or "memory"
    COMMENT_BACKEND: str = "remote"
    MEMORY_LATENCY_SECONDS: float = 0.5

    # Community presentation defaults
    DEFAULT_COMMUNITY_COLOR: str = "#FF4500"
    SNIPPET_CONTEXT_CHARS: int = 40

    # User paging
    USER_LIST_LIMIT: int = 50
    USER_SEARCH_LIMIT: int = 20

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
