import flet as ft
from typing import Callable, List

from config import COLORS, DIALOG_WIDTH_LG, FONT_SIZE_MD, IMPORT_FIELD_HEIGHT, IMPORT_PLACEHOLDER
from i18n import t
from ui.helpers import accent_btn
from ui.dialogs.base import open_dialog


def open_import_dialog(page: ft.Page, on_import: Callable[[str], None]) -> None:
    """Paste box for a CSV or JSON client list."""
    data_field = ft.TextField(
        hint_text=IMPORT_PLACEHOLDER,
        multiline=True,
        min_lines=8,
        max_lines=12,
        height=IMPORT_FIELD_HEIGHT,
        text_size=FONT_SIZE_MD,
        border_color=COLORS["border"],
        bgcolor=COLORS["input_bg"],
        focused_border_color=COLORS["accent"],
        border_radius=8,
    )

    def make_actions(close: Callable[[], None]) -> List[ft.Control]:
        def do_import(e: ft.ControlEvent) -> None:
            close()
            on_import(data_field.value or "")

        return [
            ft.TextButton(t("cancel"), on_click=close),
            accent_btn(t("import"), do_import),
        ]

    content = ft.Container(
        content=ft.Column(
            [
                ft.Text(t("import_help"), size=FONT_SIZE_MD, color=COLORS["muted"]),
                data_field,
            ],
            tight=True,
        ),
        width=DIALOG_WIDTH_LG,
    )
    open_dialog(page, t("import_client_list"), content, make_actions)
