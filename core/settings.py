from functools import lru_cache
from typing import Dict, Literal

from pydantic import BaseModel, Field, PostgresDsn, RedisDsn, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CustomSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


class AppSettings(CustomSettings):
    ENVIRONMENT: Literal["local", "dev", "prod"] = Field(default="local")
    LOG_LEVEL: str = Field(default="INFO")


class PgDbSettings(CustomSettings):
    POSTGRES_ENGINE: str = Field(default="postgresql+asyncpg")
    POSTGRES_USER: str = Field(default="postgres")
    POSTGRES_PASSWORD: SecretStr = Field(default="postgres")
    POSTGRES_DB: str = Field(default="event_list")
    POSTGRES_HOST: str = Field(default="localhost")
    POSTGRES_PORT: int = Field(default=5432)
    DATABASE_URL: PostgresDsn | str = Field(default="")
    # Create missing tables at startup instead of relying on Alembic.
    DB_CREATE_TABLES: bool = Field(default=False)

    @model_validator(mode="before")
    def validate_postgres_dsn(cls, data: dict):
        if isinstance(data, dict) and not data.get("DATABASE_URL"):
            _built_uri = PostgresDsn.build(
                scheme=data.get("POSTGRES_ENGINE", "postgresql+asyncpg"),
                username=data.get("POSTGRES_USER", "postgres"),
                password=data.get("POSTGRES_PASSWORD", "postgres"),
                host=data.get("POSTGRES_HOST", "localhost"),
                port=int(data.get("POSTGRES_PORT", 5432)),
                path=data.get("POSTGRES_DB", "event_list"),
            ).unicode_string()
            data["DATABASE_URL"] = _built_uri
        return data


class RedisSettings(CustomSettings):
    REDIS_HOST: str = Field(default="localhost")
    REDIS_PORT: int = Field(default=6379)
    REDIS_DB: int = Field(default=0)
    REDIS_PASSWORD: SecretStr = Field(default="")
    REDIS_URL: RedisDsn | str = Field(default="")

    @model_validator(mode="before")
    def validate_redis_url(cls, data: dict):
        if isinstance(data, dict) and not data.get("REDIS_URL"):
            password = data.get("REDIS_PASSWORD", "")
            _built_uri = RedisDsn.build(
                scheme="redis",
                host=data.get("REDIS_HOST", "localhost"),
                port=int(data.get("REDIS_PORT", 6379)),
                path=f"/{data.get('REDIS_DB', 0)}",
                password=password if password else None,
            ).unicode_string()
            data["REDIS_URL"] = _built_uri
        return data


class SessionSettings(CustomSettings):
    """Conversation session storage.

    Env vars:
    - SESSION_BACKEND: "memory" or "redis"
    - SESSION_TTL_SECONDS: inactivity expiry
    - SESSION_LOCK_TIMEOUT_SECONDS: upper bound on one locked transition
    """

    SESSION_BACKEND: Literal["memory", "redis"] = Field(default="memory")
    SESSION_TTL_SECONDS: int = Field(default=1800, ge=1)
    SESSION_KEY_PREFIX: str = Field(default="session")
    SESSION_LOCK_TIMEOUT_SECONDS: float = Field(default=10.0)


class LineSettings(CustomSettings):
    """Configuration for the LINE Messaging API client.

    Env vars:
    - LINE_CHANNEL_TOKEN
    - LINE_API_BASE_URL
    - LINE_OWNER_ID: messages from this user id are ignored
    """

    LINE_CHANNEL_TOKEN: SecretStr = Field(default="")
    LINE_API_BASE_URL: str = Field(default="https://api.line.me")
    LINE_OWNER_ID: str = Field(default="")
    LINE_TIMEOUT_SECONDS: float = Field(default=10.0)


class GatewaySettings(CustomSettings):
    """How the bot reaches the persistence gateway.

    GATEWAY_MODE=local talks to the database directly, GATEWAY_MODE=http
    calls a separately deployed API at GATEWAY_BASE_URL.
    """

    GATEWAY_MODE: Literal["local", "http"] = Field(default="local")
    GATEWAY_BASE_URL: str = Field(default="http://localhost:8000")
    GATEWAY_TIMEOUT_SECONDS: float = Field(default=10.0)


class BotSettings(CustomSettings):
    SIGNUP_KEYWORD: str = Field(default="signup")
    WHOAMI_KEYWORD: str = Field(default="whoami")
    REGISTER_EVENT_KEYWORD: str = Field(default="register event")
    LIST_EVENTS_KEYWORD: str = Field(default="events")
    CONFIRM_TOKEN: str = Field(default="ok")


class PromptSettings(CustomSettings):
    """Reply templates. One input template, one label per collected field."""

    PROMPT_INPUT_FORMAT: str = Field(default="Please enter the {label}.")
    PROMPT_FIELD_LABELS: Dict[str, str] = Field(
        default_factory=lambda: {
            "event_name": "event name",
            "date": "event date",
            "deadline": "entry deadline",
            "location": "location",
            "members_max": "maximum number of participants",
            "lottery": "whether entries are drawn by lottery (true/false)",
            "description": "event description",
        }
    )
    PROMPT_START: str = Field(default="Starting event registration.")
    PROMPT_CONFIRM: str = Field(
        default="All fields are filled in. Is the following correct? "
        "Reply \"{token}\" to register."
    )
    PROMPT_COMPLETED: str = Field(
        default="Your event has been registered. Here is the ticket."
    )
    PROMPT_RESTART: str = Field(
        default="Please start the event registration again from the beginning."
    )
    PROMPT_INVALID_FIELD: str = Field(
        default="The {label} \"{value}\" is not valid: {reason}. "
        "Send \"{keyword}\" to start over."
    )
    PROMPT_FAILURE: str = Field(
        default="Sorry, the event could not be registered. Please reply "
        "\"{token}\" to try again."
    )
    PROMPT_CONFLICT: str = Field(
        default="An event named \"{event_name}\" is already registered."
    )
    PROMPT_UNAVAILABLE: str = Field(
        default="Sorry, something went wrong. Please try again later."
    )
    PROMPT_SIGNUP_DONE: str = Field(default="Welcome, {user_name}!")
    PROMPT_SIGNUP_EXISTS: str = Field(default="You are already registered.")
    PROMPT_WHOAMI: str = Field(
        default="Your ID is {user_id} and your name is {user_name}, right?"
    )
    PROMPT_NOT_REGISTERED: str = Field(
        default="You are not registered yet. Send \"{keyword}\" first."
    )
    PROMPT_EVENT_LIST: str = Field(default="Your events:\n{events}")
    PROMPT_NO_EVENTS: str = Field(default="You have no registered events.")


class Settings(BaseModel):
    APP: AppSettings = Field(default_factory=AppSettings)
    DATABASE: PgDbSettings = Field(default_factory=PgDbSettings)
    REDIS: RedisSettings = Field(default_factory=RedisSettings)
    SESSION: SessionSettings = Field(default_factory=SessionSettings)
    LINE: LineSettings = Field(default_factory=LineSettings)
    GATEWAY: GatewaySettings = Field(default_factory=GatewaySettings)
    BOT: BotSettings = Field(default_factory=BotSettings)
    PROMPTS: PromptSettings = Field(default_factory=PromptSettings)


@lru_cache
def get_settings() -> Settings:
    return Settings()


SETTINGS = get_settings()
