import flet as ft
from typing import Awaitable, Callable, List, Optional

from config import (
    COLORS, AuthMode, AUTH_FORM_WIDTH, BORDER_RADIUS_LG,
    FONT_SIZE_SM, FONT_SIZE_MD, FONT_SIZE_3XL, PADDING_2XL, SPACING_MD, SPACING_LG,
)
from i18n import t
from ui.auth_controller import AuthController
from ui.helpers import accent_btn, text_field


class AuthView:
    """Sign-in screen with the login, register and password reset forms."""

    def __init__(self, page: ft.Page, ctrl: AuthController) -> None:
        self.page = page
        self.ctrl = ctrl
        self._form = ft.Column(spacing=SPACING_MD, width=AUTH_FORM_WIDTH)
        self._error = ft.Text("", color=COLORS["danger"], size=FONT_SIZE_SM, visible=False)
        self._loading = ft.ProgressRing(width=16, height=16, stroke_width=2, visible=False)
        self._submit_btn: Optional[ft.Button] = None
        self._built = False
        ctrl.set_mode_listener(self.render)

    def _submit(self, action: Callable[[], Awaitable[Optional[str]]]) -> None:
        async def _run() -> None:
            self._error.visible = False
            self._loading.visible = True
            if self._submit_btn:
                self._submit_btn.disabled = True
            self.page.update()
            try:
                error = await action()
            finally:
                self._loading.visible = False
                if self._submit_btn:
                    self._submit_btn.disabled = False
            if error:
                self._error.value = error
                self._error.visible = True
            self.page.update()

        self.page.run_task(_run)

    def _link(self, text: str, mode: AuthMode) -> ft.TextButton:
        return ft.TextButton(
            text,
            style=ft.ButtonStyle(color=COLORS["blue"]),
            on_click=lambda e: self.ctrl.switch_mode(mode),
        )

    def _actions(self, label: str, on_submit: Callable[[ft.ControlEvent], None]) -> ft.Row:
        self._submit_btn = accent_btn(label, on_submit)
        return ft.Row([self._loading, self._submit_btn], alignment=ft.MainAxisAlignment.END)

    def _login_form(self) -> List[ft.Control]:
        email = text_field(t("email"), hint=t("email_hint"))
        password = text_field(t("password"), password=True)

        def submit(e: ft.ControlEvent) -> None:
            self._submit(lambda: self.ctrl.login(email.value or "", password.value or ""))

        password.on_submit = submit
        return [
            email,
            password,
            self._actions(t("login"), submit),
            self._link(t("forgot_password"), AuthMode.RESET_REQUEST),
            self._link(t("need_account"), AuthMode.REGISTER),
        ]

    def _register_form(self) -> List[ft.Control]:
        name = text_field(t("full_name"))
        email = text_field(t("email"), hint=t("email_hint"))
        password = text_field(t("password"), password=True)
        confirm = text_field(t("confirm_password"), password=True)

        def submit(e: ft.ControlEvent) -> None:
            self._submit(lambda: self.ctrl.register(
                name.value or "", email.value or "", password.value or "", confirm.value or "",
            ))

        confirm.on_submit = submit
        return [
            name,
            email,
            password,
            confirm,
            self._actions(t("register"), submit),
            self._link(t("have_account"), AuthMode.LOGIN),
        ]

    def _reset_request_form(self) -> List[ft.Control]:
        email = text_field(t("email"), hint=t("email_hint"))

        def submit(e: ft.ControlEvent) -> None:
            self._submit(lambda: self.ctrl.request_reset(email.value or ""))

        email.on_submit = submit
        return [
            ft.Text(t("reset_request_help"), size=FONT_SIZE_MD, color=COLORS["muted"]),
            email,
            self._actions(t("send_reset_link"), submit),
            self._link(t("have_reset_link"), AuthMode.RESET_CONFIRM),
            self._link(t("back_to_login"), AuthMode.LOGIN),
        ]

    def _reset_confirm_form(self) -> List[ft.Control]:
        link = text_field(t("reset_link"), hint=t("reset_link_hint"))
        password = text_field(t("new_password"), password=True)
        confirm = text_field(t("confirm_password"), password=True)

        def submit(e: ft.ControlEvent) -> None:
            self._submit(lambda: self.ctrl.confirm_reset(
                link.value or "", password.value or "", confirm.value or "",
            ))

        confirm.on_submit = submit
        return [
            ft.Text(t("set_new_password_help"), size=FONT_SIZE_MD, color=COLORS["muted"]),
            link,
            password,
            confirm,
            self._actions(t("update_password"), submit),
            self._link(t("back_to_login"), AuthMode.LOGIN),
        ]

    def _title(self, mode: AuthMode) -> str:
        return {
            AuthMode.LOGIN: t("login"),
            AuthMode.REGISTER: t("create_account"),
            AuthMode.RESET_REQUEST: t("reset_password"),
            AuthMode.RESET_CONFIRM: t("set_new_password"),
        }[mode]

    def render(self, mode: Optional[AuthMode] = None) -> None:
        """Rebuild the form for the given (or current) mode."""
        mode = mode or self.ctrl.mode
        builders = {
            AuthMode.LOGIN: self._login_form,
            AuthMode.REGISTER: self._register_form,
            AuthMode.RESET_REQUEST: self._reset_request_form,
            AuthMode.RESET_CONFIRM: self._reset_confirm_form,
        }
        self._error.visible = False
        self._loading.visible = False
        self._form.controls = [
            ft.Text(self._title(mode), size=FONT_SIZE_MD + 6, weight="bold"),
            *builders[mode](),
            self._error,
        ]
        if self._built:
            self.page.update()

    def build(self) -> ft.Control:
        self.render()
        self._built = True
        return ft.Container(
            content=ft.Column(
                [
                    ft.Icon(ft.Icons.TIMER_OUTLINED, size=48, color=COLORS["accent"]),
                    ft.Text(t("app_title"), size=FONT_SIZE_3XL, weight="bold"),
                    ft.Container(
                        content=self._form,
                        bgcolor=COLORS["card"],
                        padding=PADDING_2XL,
                        border_radius=BORDER_RADIUS_LG,
                    ),
                ],
                horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                alignment=ft.MainAxisAlignment.CENTER,
                spacing=SPACING_LG,
                scroll=ft.ScrollMode.AUTO,
            ),
            alignment=ft.Alignment(0, 0),
            expand=True,
        )
