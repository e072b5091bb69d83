import flet as ft
from typing import Callable, List, Optional

from config import COLORS, DIALOG_WIDTH_MD, FONT_SIZE_MD, SPACING_MD, CLIENT_NAME_MAX_LENGTH
from formatters import TimeFormatter
from i18n import t
from models.entities import Client
from services.client_service import ClientService
from services.import_parser import parse_rate
from ui.helpers import accent_btn, text_field
from ui.dialogs.base import open_dialog, open_confirm_dialog


class ClientDialogs:
    """Add/edit form and the confirmations for destructive client actions."""

    def __init__(
        self,
        page: ft.Page,
        client_service: ClientService,
        on_add: Callable[[str, float], None],
        on_update: Callable[[str, str, float], None],
        on_delete: Callable[[str], None],
        on_reset_time: Callable[[str], None],
    ) -> None:
        self.page = page
        self.client_service = client_service
        self._on_add = on_add
        self._on_update = on_update
        self._on_delete = on_delete
        self._on_reset_time = on_reset_time

    def open(self, client: Optional[Client] = None) -> None:
        """Open the form; editing when a client is given, adding otherwise."""
        name_field = text_field(
            t("client_name"),
            value=client.name if client else "",
            hint=t("enter_client_name"),
            max_length=CLIENT_NAME_MAX_LENGTH,
            autofocus=True,
        )
        rate_field = text_field(
            t("hourly_rate"),
            value=f"{client.hourly_rate:g}" if client else "",
            hint=t("rate_per_hour"),
            keyboard_type=ft.KeyboardType.NUMBER,
            prefix_text="$",
        )
        error = ft.Text("", color=COLORS["danger"], size=FONT_SIZE_MD, visible=False)
        editing_id = client.id if client else None

        def make_actions(close: Callable[[], None]) -> List[ft.Control]:
            def submit(e: ft.ControlEvent) -> None:
                name = (name_field.value or "").strip()
                message = self.client_service.validate_client_name(name, editing_id)
                if message:
                    error.value = message
                    error.visible = True
                    self.page.update()
                    return
                rate = parse_rate(rate_field.value or "")
                close()
                if client:
                    self._on_update(client.id, name, rate)
                else:
                    self._on_add(name, rate)

            name_field.on_submit = submit
            rate_field.on_submit = submit
            return [
                ft.TextButton(t("cancel"), on_click=close),
                accent_btn(t("save") if client else t("add_client"), submit),
            ]

        content = ft.Column(
            [name_field, rate_field, error],
            tight=True,
            spacing=SPACING_MD,
            width=DIALOG_WIDTH_MD,
        )
        open_dialog(self.page, t("edit_client") if client else t("new_client"), content, make_actions)

    def confirm_delete(self, client: Client) -> None:
        open_confirm_dialog(
            self.page,
            t("delete_client"),
            t("delete_client_confirm").format(name=client.name),
            t("delete"),
            lambda: self._on_delete(client.id),
        )

    def confirm_reset_time(self, client: Client) -> None:
        open_confirm_dialog(
            self.page,
            t("reset_time"),
            t("reset_time_confirm").format(name=client.name),
            t("reset"),
            lambda: self._on_reset_time(client.id),
        )

    def confirm_delete_entry(self, entry_id: str, duration_ms: int, on_delete: Callable[[str], None]) -> None:
        open_confirm_dialog(
            self.page,
            t("delete_entry"),
            t("delete_entry_confirm").format(duration=TimeFormatter.format_time(duration_ms)),
            t("delete"),
            lambda: on_delete(entry_id),
        )
