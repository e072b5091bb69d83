"""Dialog utilities - factory functions for consistent dialog styling.

open_dialog() creates modal dialogs with standard layout (title, content, actions).
open_confirm_dialog() is the yes/no variant used before destructive actions.
create_option_item() builds clickable rows used in menus.
"""
import flet as ft
from typing import Callable, Tuple, Optional, List

from config import COLORS, DIALOG_WIDTH_MD, FONT_SIZE_LG, ICON_SIZE_MD, SPACING_LG
from i18n import t
from ui.helpers import danger_btn


def open_dialog(
    page: ft.Page,
    title: str,
    content: ft.Control,
    make_actions: Callable[[Callable[[], None]], List[ft.Control]],
) -> Tuple[ft.AlertDialog, Callable[[], None]]:
    holder: List[Optional[ft.AlertDialog]] = [None]

    def close(e: Optional[ft.ControlEvent] = None) -> None:
        if holder[0] and holder[0].open:
            page.pop_dialog()

    holder[0] = ft.AlertDialog(
        modal=True,
        title=ft.Text(title),
        content=content,
        actions=make_actions(close),
        actions_alignment=ft.MainAxisAlignment.END,
        bgcolor=COLORS["card"],
    )
    page.show_dialog(holder[0])
    return holder[0], close


def open_confirm_dialog(
    page: ft.Page,
    title: str,
    message: str,
    confirm_text: str,
    on_confirm: Callable[[], None],
) -> None:
    """Ask before a destructive action; on_confirm runs after the dialog closes."""

    def make_actions(close: Callable[[], None]) -> List[ft.Control]:
        def handle_confirm(e: ft.ControlEvent) -> None:
            close()
            on_confirm()

        return [
            ft.TextButton(t("cancel"), on_click=close),
            danger_btn(confirm_text, handle_confirm),
        ]

    content = ft.Container(
        content=ft.Text(message, size=FONT_SIZE_LG),
        width=DIALOG_WIDTH_MD,
    )
    open_dialog(page, title, content, make_actions)


def create_option_item(
    icon: str,
    text: str,
    on_click: Callable[[ft.ControlEvent], None],
    color: str = COLORS["accent"],
    text_color: Optional[str] = None,
    as_popup: bool = False,
) -> ft.Control:
    row = ft.Row(
        [
            ft.Icon(icon, size=ICON_SIZE_MD, color=color),
            ft.Text(text, size=FONT_SIZE_LG, color=text_color, expand=not as_popup),
        ],
        spacing=SPACING_LG,
    )

    if as_popup:
        return ft.PopupMenuItem(
            content=ft.Container(
                content=row,
                padding=ft.Padding.symmetric(vertical=5, horizontal=10),
            ),
            on_click=on_click,
        )

    return ft.Container(
        content=row,
        padding=ft.Padding.symmetric(vertical=10, horizontal=15),
        border_radius=8,
        ink=True,
        on_click=on_click,
    )
