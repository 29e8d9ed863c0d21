from __future__ import annotations

import structlog
from dependency_injector import containers, providers

from core.settings import SETTINGS
from infra.resources import DatabaseResource, RedisResource

logger = structlog.get_logger("eventbot")


class InfrastructureContainer(containers.DeclarativeContainer):
    config = providers.Configuration()
    settings = providers.Object(SETTINGS)
    logger = providers.Object(logger)

    # Database
    database = providers.Resource(
        DatabaseResource,
        database_url=str(SETTINGS.DATABASE.DATABASE_URL),
    )

    # Redis (only connected when sessions live there)
    redis_db = providers.Resource(
        RedisResource,
        redis_url=str(SETTINGS.REDIS.REDIS_URL),
    )

    # Conversation sessions
    session_backend = providers.Object(SETTINGS.SESSION.SESSION_BACKEND)
    session_store = providers.Selector(
        session_backend,
        memory=providers.Singleton(
            "bot.session_store.InMemorySessionStore",
            ttl_seconds=SETTINGS.SESSION.SESSION_TTL_SECONDS,
        ),
        redis=providers.Singleton(
            "bot.session_store.RedisSessionStore",
            redis_resource=redis_db,
            ttl_seconds=SETTINGS.SESSION.SESSION_TTL_SECONDS,
            key_prefix=SETTINGS.SESSION.SESSION_KEY_PREFIX,
            lock_timeout=SETTINGS.SESSION.SESSION_LOCK_TIMEOUT_SECONDS,
        ),
    )


class ServiceContainer(containers.DeclarativeContainer):
    """Application services - depends on infrastructure."""

    infrastructure = providers.DependenciesContainer()

    user_service = providers.Factory("api.features.users.service.UserService")
    event_service = providers.Factory("api.features.events.service.EventService")
    participant_service = providers.Factory(
        "api.features.participants.service.ParticipantService",
    )


class BotContainer(containers.DeclarativeContainer):
    """Chat side: platform client, registration engine and dispatcher."""

    infrastructure = providers.DependenciesContainer()
    services = providers.DependenciesContainer()

    platform_client = providers.Singleton(
        "bot.platform.LineMessagingClient",
        channel_token=SETTINGS.LINE.LINE_CHANNEL_TOKEN.get_secret_value(),
        base_url=SETTINGS.LINE.LINE_API_BASE_URL,
        timeout=SETTINGS.LINE.LINE_TIMEOUT_SECONDS,
    )

    renderer = providers.Singleton("bot.renderer.NotificationRenderer")

    prompts = providers.Singleton(
        "bot.prompts.Prompts",
        settings=SETTINGS.PROMPTS,
        confirm_token=SETTINGS.BOT.CONFIRM_TOKEN,
        restart_keyword=SETTINGS.BOT.REGISTER_EVENT_KEYWORD,
    )

    gateway_mode = providers.Object(SETTINGS.GATEWAY.GATEWAY_MODE)
    gateway = providers.Selector(
        gateway_mode,
        local=providers.Singleton(
            "bot.gateway.LocalGateway",
            database=infrastructure.database,
            user_service=services.user_service,
            event_service=services.event_service,
        ),
        http=providers.Singleton(
            "bot.gateway.HttpGateway",
            base_url=SETTINGS.GATEWAY.GATEWAY_BASE_URL,
            timeout=SETTINGS.GATEWAY.GATEWAY_TIMEOUT_SECONDS,
        ),
    )

    engine = providers.Singleton(
        "bot.engine.RegistrationEngine",
        store=infrastructure.session_store,
        gateway=gateway,
        prompts=prompts,
        confirm_token=SETTINGS.BOT.CONFIRM_TOKEN,
    )

    dispatcher = providers.Singleton(
        "bot.dispatcher.EntryDispatcher",
        engine=engine,
        gateway=gateway,
        platform=platform_client,
        renderer=renderer,
        prompts=prompts,
        bot_settings=SETTINGS.BOT,
        owner_id=SETTINGS.LINE.LINE_OWNER_ID,
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Main application container composing all sub-containers."""

    wiring_config = containers.WiringConfiguration(
        modules=[
            "api.main",
            "api.shared.db",
            "api.features.users.router",
            "api.features.events.router",
            "api.features.participants.router",
            "api.features.webhook.router",
        ]
    )

    infrastructure = providers.Container(InfrastructureContainer)
    services = providers.Container(ServiceContainer, infrastructure=infrastructure)
    bot = providers.Container(BotContainer, infrastructure=infrastructure, services=services)
