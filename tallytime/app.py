import flet as ft
import logging
from typing import Any, List, Optional

from api import TallyAPI
from config import (
    COLORS, ConfigurationError, FONT_SIZE_MD, FONT_SIZE_XL,
    PADDING_XL, SPACING_LG,
)
from core import ServiceContainer, bootstrap, shutdown
from database import BackendError
from events import event_bus, AppEvent, Subscription
from i18n import t
from services.auth import AuthService, AuthState
from ui.auth_controller import AuthController
from ui.components.client_sidebar import ClientSidebar
from ui.components.client_timer import ClientTimerCard
from ui.components.data_persistence import DataPersistenceBar
from ui.controller import UIController
from ui.helpers import SnackService
from ui.pages.auth_view import AuthView
from ui.pages.config_error_view import ConfigErrorView, build_loading_view

logger = logging.getLogger(__name__)

# Events after which the sidebar and timer card are rebuilt from state
_REFRESH_EVENTS = (
    AppEvent.CLIENT_CREATED,
    AppEvent.CLIENT_UPDATED,
    AppEvent.CLIENT_ARCHIVED,
    AppEvent.CLIENT_DELETED,
    AppEvent.CLIENT_SELECTED,
    AppEvent.CLIENTS_LOADED,
    AppEvent.CLIENTS_IMPORTED,
    AppEvent.TIMER_STARTED,
    AppEvent.TIMER_STOPPED,
    AppEvent.ENTRY_UPDATED,
    AppEvent.ENTRY_DELETED,
    AppEvent.CLIENT_TIME_RESET,
    AppEvent.FILTER_CHANGED,
    AppEvent.DATA_RESET,
)


class TallyTimeApp:
    """Main application class: routes between the auth view and the tracker."""

    def __init__(self, page: ft.Page) -> None:
        self.page = page
        self.snack = SnackService(page)
        self._subscriptions: List[Subscription] = []

        self.services: Optional[ServiceContainer] = None
        self.api: Optional[TallyAPI] = None
        self.ctrl: Optional[UIController] = None
        self.auth_ctrl: Optional[AuthController] = None
        self.auth_view: Optional[AuthView] = None
        self.sidebar: Optional[ClientSidebar] = None
        self.timer_card: Optional[ClientTimerCard] = None

        self._setup_page()
        self._show(build_loading_view())

        # Register cleanup on page close
        self.page.on_close = self._on_page_close

        self.page.run_task(self._start)

    def _setup_page(self) -> None:
        self.page.title = t("app_title")
        self.page.theme_mode = ft.ThemeMode.DARK
        self.page.bgcolor = COLORS["bg"]
        self.page.padding = 0

    def _show(self, view: ft.Control) -> None:
        self.page.controls.clear()
        self.page.add(view)

    async def _start(self) -> None:
        """Bootstrap services and restore the stored session."""
        try:
            self.services = await bootstrap()
        except ConfigurationError as e:
            logger.error(f"Configuration error: {e}")
            self._show(ConfigErrorView(self.page, str(e)).build())
            return

        svc = self.services
        # Tick loop runs on Flet's loop
        svc.timer.inject_dependencies(async_scheduler=self.page.run_task)

        self.api = TallyAPI(svc)
        self.ctrl = UIController(self.page, self.api, self.snack)
        self.ctrl.set_logout_handler(self._logout)
        self.auth_ctrl = AuthController(self.page, svc.auth, svc.config, self.snack)
        self.auth_view = AuthView(self.page, self.auth_ctrl)

        svc.auth.set_listener(self._on_auth_changed)
        await svc.auth.check_session()

    def _on_auth_changed(self, auth: AuthService) -> None:
        if self.auth_ctrl and self.auth_ctrl.routing_suppressed:
            return
        if auth.state == AuthState.LOADING:
            self._show(build_loading_view())
        elif auth.state == AuthState.AUTHENTICATED:
            self.page.run_task(self._enter_tracker)
        else:
            self._leave_tracker()
            self._show(self.auth_view.build())

    # ------------------------------------------------------------------
    # Tracker
    # ------------------------------------------------------------------

    async def _enter_tracker(self) -> None:
        self._subscribe_to_events()
        self._show(self._build_tracker())
        try:
            await self.api.load_clients()
        except BackendError as e:
            logger.error(f"Failed to load clients: {e}")
            self.snack.error(f"{t('error_loading_clients')}: {e.message}")
            self._refresh()

    def _build_tracker(self) -> ft.Control:
        svc = self.services
        self.sidebar = ClientSidebar(svc.state, self.ctrl)
        self.timer_card = ClientTimerCard(self.ctrl, svc.stats)
        self.timer_card.show(svc.state.selected_client)

        user = svc.auth.user
        header = ft.Row(
            [
                ft.Text(t("app_title"), size=FONT_SIZE_XL, weight="bold", expand=True),
                ft.Text(user.display_name if user else "", size=FONT_SIZE_MD, color=COLORS["muted"]),
                ft.IconButton(
                    icon=ft.Icons.LOGOUT,
                    icon_color=COLORS["muted"],
                    tooltip=t("logout"),
                    on_click=self.ctrl.logout,
                ),
            ],
            vertical_alignment=ft.CrossAxisAlignment.CENTER,
        )
        main_area = ft.Container(
            content=ft.Column(
                [
                    header,
                    self.timer_card,
                    DataPersistenceBar(self.page, self.api, self.ctrl),
                ],
                spacing=SPACING_LG,
                expand=True,
            ),
            padding=PADDING_XL,
            expand=True,
        )

        row = ft.Row(
            [self.sidebar, main_area],
            expand=True,
            vertical_alignment=ft.CrossAxisAlignment.STRETCH,
            spacing=0,
        )
        return row

    def _leave_tracker(self) -> None:
        """Drop the tracker: stop ticking and forget the previous user's data."""
        self._unsubscribe_all()
        if self.services:
            self.services.timer.cleanup()
            self.services.state.clear()
        self.sidebar = None
        self.timer_card = None

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def _subscribe_to_events(self) -> None:
        """Subscribe to application events and track subscriptions for cleanup."""
        self._unsubscribe_all()
        for event in _REFRESH_EVENTS:
            self._subscriptions.append(event_bus.subscribe(event, self._refresh))
        self._subscriptions.append(event_bus.subscribe(AppEvent.TIMER_TICK, self._on_tick))

    def _unsubscribe_all(self) -> None:
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions.clear()

    def _refresh(self, data: Any = None) -> None:
        if self.sidebar is None or self.timer_card is None:
            return
        self.sidebar.refresh()
        self.timer_card.show(self.services.state.selected_client)
        self.page.update()

    def _on_tick(self, now: Any) -> None:
        if self.timer_card is None:
            return
        self.timer_card.tick(now)
        self.page.update()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _logout(self) -> None:
        async def _do_logout() -> None:
            self._leave_tracker()
            await self.auth_ctrl.logout()

        self.page.run_task(_do_logout)

    def _on_page_close(self, e: ft.ControlEvent) -> None:
        """Handle page close - cleanup resources."""
        self._unsubscribe_all()
        services = self.services
        if services is None:
            return
        services.timer.cleanup()

        async def cleanup_all() -> None:
            await shutdown(services)

        try:
            self.page.run_task(cleanup_all)
        except RuntimeError as e:
            # Page may be closing or event loop unavailable
            logger.debug(f"Could not schedule cleanup (page closing): {e}")


def create_app(page: ft.Page) -> TallyTimeApp:
    """Factory function to create the application."""
    return TallyTimeApp(page)
