import flet as ft

from config import COLORS, BORDER_RADIUS_LG, DIALOG_WIDTH_LG, FONT_SIZE_MD, FONT_SIZE_2XL, PADDING_2XL, SPACING_LG
from i18n import t


class ConfigErrorView:
    """Shown instead of the app when the backend settings are missing."""

    def __init__(self, page: ft.Page, message: str) -> None:
        self.page = page
        self.message = message

    def build(self) -> ft.Control:
        env_help = ft.Container(
            content=ft.Text(
                "SUPABASE_URL=https://<project>.supabase.co\nSUPABASE_ANON_KEY=<anon key>",
                size=FONT_SIZE_MD,
                font_family="monospace",
                selectable=True,
            ),
            bgcolor=COLORS["input_bg"],
            padding=PADDING_2XL,
            border_radius=BORDER_RADIUS_LG,
        )
        return ft.Container(
            content=ft.Column(
                [
                    ft.Icon(ft.Icons.ERROR_OUTLINE, size=48, color=COLORS["danger"]),
                    ft.Text(t("configuration_required"), size=FONT_SIZE_2XL, weight="bold"),
                    ft.Text(self.message, size=FONT_SIZE_MD, color=COLORS["danger"]),
                    ft.Text(t("configuration_help"), size=FONT_SIZE_MD, color=COLORS["muted"]),
                    env_help,
                ],
                horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                spacing=SPACING_LG,
                width=DIALOG_WIDTH_LG,
            ),
            alignment=ft.Alignment(0, 0),
            expand=True,
        )


def build_loading_view() -> ft.Control:
    return ft.Container(
        content=ft.Column(
            [
                ft.ProgressRing(color=COLORS["accent"]),
                ft.Text(t("loading"), size=FONT_SIZE_MD, color=COLORS["muted"]),
            ],
            horizontal_alignment=ft.CrossAxisAlignment.CENTER,
            alignment=ft.MainAxisAlignment.CENTER,
        ),
        alignment=ft.Alignment(0, 0),
        expand=True,
    )
