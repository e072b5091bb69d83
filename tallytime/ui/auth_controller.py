"""
Authentication controller for TallyTime.

Manages the authentication UI flow:
- Switch between login, register, reset request and set-new-password forms
- Run the AuthService calls for each form and report the outcome
- Keep the app from routing away while a password reset is being confirmed

Routing itself happens in the app's auth listener. During the reset confirm
the recovered session briefly makes the user AUTHENTICATED; the listener
checks ``routing_suppressed`` and stays on the auth view.
"""
import flet as ft
import logging
from typing import Callable, Optional

from config import AuthMode, BackendConfig
from i18n import t
from services.auth import AuthService, parse_recovery_link, validate_new_password
from ui.helpers import SnackService

logger = logging.getLogger(__name__)


class AuthController:
    """
    Controller for authentication forms.

    Each submit method returns an error message for the form to show, or
    None on success. Success messages go through the snackbar.

    Usage:
        auth_ctrl = AuthController(page, services.auth, services.config, snack)
        auth_ctrl.set_mode_listener(auth_view.render)
        error = await auth_ctrl.login(email, password)
    """

    def __init__(
        self,
        page: ft.Page,
        auth: AuthService,
        config: Optional[BackendConfig],
        snack: SnackService,
    ) -> None:
        self.page = page
        self.snack = snack
        self._auth = auth
        self._config = config
        self._mode = AuthMode.LOGIN
        self._reset_in_progress = False
        self._on_mode_change: Optional[Callable[[AuthMode], None]] = None

    @property
    def mode(self) -> AuthMode:
        return self._mode

    @property
    def routing_suppressed(self) -> bool:
        """True while a reset link session is being used to set a password."""
        return self._reset_in_progress

    def set_mode_listener(self, callback: Optional[Callable[[AuthMode], None]]) -> None:
        self._on_mode_change = callback

    def switch_mode(self, mode: AuthMode) -> None:
        if mode == self._mode:
            return
        self._mode = mode
        if self._on_mode_change:
            self._on_mode_change(mode)

    async def login(self, email: str, password: str) -> Optional[str]:
        result = await self._auth.login(email, password)
        if not result.success:
            return result.error or t("login_failed")
        return None

    async def register(self, name: str, email: str, password: str, confirm: str) -> Optional[str]:
        error = validate_new_password(password, confirm)
        if error:
            return error
        result = await self._auth.register(name, email, password)
        if not result.success:
            return result.error or t("registration_failed")
        if not self._auth.is_authenticated:
            # Email confirmation required before the first login
            self.snack.success(t("check_email_to_confirm"))
            self.switch_mode(AuthMode.LOGIN)
        return None

    async def request_reset(self, email: str) -> Optional[str]:
        redirect = self._config.reset_redirect if self._config else ""
        result = await self._auth.request_password_reset(email, redirect)
        if not result.success:
            return result.error or t("reset_request_failed")
        self.snack.success(t("reset_email_sent"))
        self.switch_mode(AuthMode.RESET_CONFIRM)
        return None

    async def confirm_reset(self, link: str, password: str, confirm: str) -> Optional[str]:
        """Adopt the reset link's session, set the password, then sign out.

        The user logs in again with the new password.
        """
        error = validate_new_password(password, confirm)
        if error:
            return error
        tokens = parse_recovery_link(link)
        if tokens is None:
            return t("invalid_reset_link")

        self._reset_in_progress = True
        try:
            result = await self._auth.recover_session(*tokens)
            if not result.success:
                return result.error or t("invalid_reset_link")
            result = await self._auth.update_password(password)
            await self._auth.logout()
            if not result.success:
                logger.warning(f"Password update failed: {result.error}")
                return result.error or t("password_update_failed")
        finally:
            self._reset_in_progress = False

        logger.info("Password updated through reset link")
        self.snack.success(f"{t('password_updated')} {t('login_with_new_password')}")
        self.switch_mode(AuthMode.LOGIN)
        return None

    async def logout(self) -> None:
        await self._auth.logout()
        self._mode = AuthMode.LOGIN
