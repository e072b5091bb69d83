"""Headless bootstrap for TallyTime services.

Initializes the service layer without any Flet dependency, suitable for
CLI tools, scripts, and testing.

Usage:
    from core import bootstrap, shutdown
    from api import TallyAPI

    svc = await bootstrap()                       # hosted backend from env
    await svc.auth.login("me@example.com", "secret")
    api = TallyAPI(svc)
    await api.load_clients()
    await shutdown(svc)

Tests and offline scripts pass a SqliteTableStore and their own identity
client instead of reading the backend settings.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from config import BackendConfig, load_backend_config
from database import db, TableStore
from database.rest_store import RestTableStore
from events import event_bus
from models.entities import AppState
from services.auth import AuthService
from services.client_service import ClientService
from services.identity import IdentityClient
from services.stats import StatsService, stats_service
from services.time_entry_service import TimeEntryService
from services.timer import TimerService

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Container holding all initialized services."""
    state: AppState
    auth: AuthService
    identity: IdentityClient
    client: ClientService
    time_entry: TimeEntryService
    timer: TimerService
    stats: StatsService
    config: Optional[BackendConfig] = None


async def bootstrap(
    config: Optional[BackendConfig] = None,
    store: Optional[TableStore] = None,
    identity: Optional[IdentityClient] = None,
) -> ServiceContainer:
    """Initialize the service layer without Flet.

    Args:
        config: Backend settings. Read from the environment when a store or
            identity client has to be created and none is given.
        store: Table store for the data layer. Defaults to the hosted
            PostgREST endpoint authorized with the current session token.
        identity: Identity client. Defaults to the hosted identity service.

    Returns:
        ServiceContainer with all services ready to use. The auth state is
        LOADING until ``auth.check_session()`` is awaited.

    Raises:
        ConfigurationError: If backend settings are needed but missing.
    """
    if (store is None or identity is None) and config is None:
        config = load_backend_config()

    if identity is None:
        identity = IdentityClient(config)
    if store is None:
        store = RestTableStore(config, token_provider=lambda: identity.access_token)
    db.configure(store)

    state = AppState()
    container = ServiceContainer(
        state=state,
        auth=AuthService(identity),
        identity=identity,
        client=ClientService(state),
        time_entry=TimeEntryService(),
        timer=TimerService(),
        stats=stats_service,
        config=config,
    )
    logger.info("Services bootstrapped")
    return container


async def shutdown(services: Optional[ServiceContainer] = None) -> None:
    """Stop the tick loop and close network and database connections."""
    if services is not None:
        services.timer.cleanup()
        await services.identity.close()
    event_bus.clear()
    await db.close()
