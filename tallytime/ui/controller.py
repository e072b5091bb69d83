import flet as ft
import logging
from typing import Awaitable, Callable, Optional

from api import TallyAPI
from config import ConfigurationError
from database import BackendError, ValidationError
from i18n import t
from services.import_parser import ClientImportError
from services.timer import TimerError
from ui.dialogs import ClientDialogs, open_import_dialog, open_note_dialog, open_confirm_dialog
from ui.helpers import SnackService

logger = logging.getLogger(__name__)


class UIController:
    """Facade for UI components to trigger application actions.

    Components call plain methods like ctrl.start_timer(client_id); the
    controller schedules the async TallyAPI action on the page and turns
    failures into snackbar messages. Re-rendering happens through the
    events TallyAPI emits, not here.
    """

    def __init__(self, page: ft.Page, api: TallyAPI, snack: SnackService) -> None:
        self.page = page
        self.api = api
        self.snack = snack
        self.dialogs = ClientDialogs(
            page,
            api.services.client,
            on_add=self.add_client,
            on_update=self.update_client,
            on_delete=self.delete_client,
            on_reset_time=self.reset_client_time,
        )
        self._on_logout: Optional[Callable[[], None]] = None

    def set_logout_handler(self, handler: Callable[[], None]) -> None:
        self._on_logout = handler

    def _run(
        self,
        action: Callable[[], Awaitable[object]],
        error_key: str,
        success_message: Optional[str] = None,
    ) -> None:
        """Schedule an async action; show success or a toast with the error."""
        async def _coro() -> None:
            try:
                await action()
            except (ValidationError, TimerError, ClientImportError) as e:
                self.snack.error(f"{t(error_key)}: {e}")
                return
            except BackendError as e:
                logger.error(f"{error_key}: {e}")
                self.snack.error(f"{t(error_key)}: {e.message}. {t('please_try_again')}")
                return
            except ConfigurationError as e:
                self.snack.error(str(e))
                return
            if success_message:
                self.snack.success(success_message)

        self.page.run_task(_coro)

    # Clients

    def open_add_client(self, e: Optional[ft.ControlEvent] = None) -> None:
        self.dialogs.open()

    def open_edit_client(self, client_id: str) -> None:
        client = self.api.state.get_client_by_id(client_id)
        if client:
            self.dialogs.open(client)

    def add_client(self, name: str, rate: float) -> None:
        self._run(lambda: self.api.add_client(name, rate), "error_adding_client",
                  t("client_added").format(name=name))

    def update_client(self, client_id: str, name: str, rate: float) -> None:
        self._run(lambda: self.api.update_client(client_id, name=name, hourly_rate=rate),
                  "error_updating_client", t("client_updated"))

    def toggle_archive(self, client_id: str) -> None:
        client = self.api.state.get_client_by_id(client_id)
        if client is None:
            return
        message = t("client_restored") if client.archived else t("client_archived")
        self._run(lambda: self.api.toggle_archive(client_id), "error_updating_client",
                  message.format(name=client.name))

    def confirm_delete_client(self, client_id: str) -> None:
        client = self.api.state.get_client_by_id(client_id)
        if client:
            self.dialogs.confirm_delete(client)

    def delete_client(self, client_id: str) -> None:
        self._run(lambda: self.api.delete_client(client_id), "error_deleting_client", t("client_deleted"))

    def confirm_reset_time(self, client_id: str) -> None:
        client = self.api.state.get_client_by_id(client_id)
        if client is None:
            return
        if client.has_active_timer:
            self.snack.error(t("stop_timer_before_reset"))
            return
        self.dialogs.confirm_reset_time(client)

    def reset_client_time(self, client_id: str) -> None:
        self._run(lambda: self.api.reset_client_time(client_id), "error_resetting_time", t("time_reset"))

    def select_client(self, client_id: str) -> None:
        self.api.select_client(client_id)

    def set_search(self, query: str) -> None:
        self.api.set_search(query)

    def set_show_archived(self, show_archived: bool) -> None:
        self.api.set_show_archived(show_archived)

    # Timers

    def start_timer(self, client_id: str) -> None:
        self._run(lambda: self.api.start_timer(client_id), "error_starting_timer", t("timer_started"))

    def stop_timer(self, client_id: str) -> None:
        async def _stop() -> None:
            await self.api.stop_timer(client_id)
            open_note_dialog(self.page, on_save=self.save_note, on_skip=self.api.dismiss_note)

        self._run(_stop, "error_stopping_timer", t("timer_stopped"))

    def save_note(self, note: str) -> None:
        self._run(lambda: self.api.add_note(note), "error_saving_note",
                  t("note_added") if note.strip() else None)

    def confirm_delete_entry(self, entry_id: str, duration_ms: int) -> None:
        self.dialogs.confirm_delete_entry(entry_id, duration_ms, self.delete_entry)

    def delete_entry(self, entry_id: str) -> None:
        self._run(lambda: self.api.delete_time_entry(entry_id), "error_deleting_entry", t("entry_deleted"))

    # Data

    def open_import(self, e: Optional[ft.ControlEvent] = None) -> None:
        open_import_dialog(self.page, self.import_clients)

    def import_clients(self, text: str) -> None:
        async def _import() -> None:
            summary = await self.api.import_clients(text)
            message = t("clients_imported").format(count=len(summary.imported))
            if summary.skipped:
                message += " " + t("duplicates_skipped").format(count=len(summary.skipped))
            self.snack.success(message)

        self._run(_import, "import_failed")

    def confirm_reset_data(self, e: Optional[ft.ControlEvent] = None) -> None:
        open_confirm_dialog(
            self.page,
            t("reset_data"),
            t("reset_data_confirm"),
            t("reset"),
            self.reset_data,
        )

    def reset_data(self) -> None:
        self._run(self.api.reset_data, "error_resetting_data", t("data_reset_complete"))

    def logout(self, e: Optional[ft.ControlEvent] = None) -> None:
        if self._on_logout:
            self._on_logout()
