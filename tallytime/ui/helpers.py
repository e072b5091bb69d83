import flet as ft
from typing import Optional

from config import COLORS, SNACK_DURATION_MS


def accent_btn(text: str, on_click, icon: Optional[str] = None) -> ft.Button:
    return ft.Button(
        text,
        on_click=on_click,
        bgcolor=COLORS["accent"],
        color=COLORS["white"],
        icon=icon,
    )


def danger_btn(
    text: str,
    on_click,
    icon: Optional[str] = None,
) -> ft.Button:
    return ft.Button(
        text,
        on_click=on_click,
        bgcolor=COLORS["danger"],
        color=COLORS["white"],
        icon=icon,
    )


def outline_btn(text: str, on_click, icon: Optional[str] = None) -> ft.OutlinedButton:
    return ft.OutlinedButton(text, on_click=on_click, icon=icon)


def text_field(
    label: str,
    value: str = "",
    hint: str = "",
    password: bool = False,
    on_submit=None,
    **kwargs,
) -> ft.TextField:
    """Text input with the app's dark styling."""
    return ft.TextField(
        label=label,
        value=value,
        hint_text=hint,
        password=password,
        can_reveal_password=password,
        border_color=COLORS["border"],
        bgcolor=COLORS["input_bg"],
        focused_border_color=COLORS["accent"],
        border_radius=8,
        on_submit=on_submit,
        **kwargs,
    )


class SnackService:
    def __init__(self, page: ft.Page) -> None:
        self.page = page
        self.snack = ft.SnackBar(
            content=ft.Text(""),
            bgcolor=COLORS["card"],
            duration=SNACK_DURATION_MS,
        )
        page.overlay.append(self.snack)

    def show(
        self,
        message: str,
        color: Optional[str] = None,
        update: bool = True,
    ) -> None:
        self.snack.content = ft.Text(message, color=COLORS["white"])
        self.snack.bgcolor = color or COLORS["card"]
        self.snack.open = True
        if update:
            self.page.update()

    def error(self, message: str, update: bool = True) -> None:
        self.show(message, COLORS["danger"], update)

    def success(self, message: str, update: bool = True) -> None:
        self.show(message, COLORS["green"], update)
