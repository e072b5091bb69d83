import flet as ft
from typing import Callable, List

from config import COLORS, DIALOG_WIDTH_LG, MAX_TEXT_LENGTH
from i18n import t
from ui.helpers import accent_btn
from ui.dialogs.base import open_dialog


def open_note_dialog(
    page: ft.Page,
    on_save: Callable[[str], None],
    on_skip: Callable[[], None],
) -> None:
    """Ask what was worked on during the session that just stopped."""
    note_field = ft.TextField(
        hint_text=t("note_placeholder"),
        multiline=True,
        min_lines=4,
        max_lines=8,
        max_length=MAX_TEXT_LENGTH,
        border_color=COLORS["border"],
        bgcolor=COLORS["input_bg"],
        focused_border_color=COLORS["accent"],
        border_radius=8,
        autofocus=True,
    )

    def make_actions(close: Callable[[], None]) -> List[ft.Control]:
        def skip(e: ft.ControlEvent) -> None:
            close()
            on_skip()

        def save(e: ft.ControlEvent) -> None:
            close()
            on_save(note_field.value or "")

        return [
            ft.TextButton(t("skip"), on_click=skip),
            accent_btn(t("save_notes"), save),
        ]

    open_dialog(
        page,
        t("what_did_you_work_on"),
        ft.Container(content=note_field, width=DIALOG_WIDTH_LG),
        make_actions,
    )
