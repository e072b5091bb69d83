"""Timer card for the selected client.

Shows the running session's elapsed time, start/stop and reset buttons, the
total/week/month time and earnings and today's completed sessions. The
display is rebuilt from wall clock on every refresh, so a missed tick never
drifts the shown time.
"""
import flet as ft
from datetime import datetime
from typing import List, Optional

from config import (
    COLORS, BORDER_RADIUS, FONT_SIZE_MD, FONT_SIZE_LG, FONT_SIZE_2XL, FONT_SIZE_3XL,
    FONT_SIZE_TIMER, ICON_SIZE_SM, PADDING_LG, PADDING_2XL, SPACING_MD, SPACING_LG,
)
from formatters import TimeFormatter
from i18n import t
from models.entities import Client
from services.stats import StatsService, ClientSummary, elapsed_ms
from ui.controller import UIController
from ui.helpers import accent_btn, danger_btn


def _stat_tile(label: str, time_value: str, money: str, caption: Optional[str] = None) -> ft.Container:
    rows: List[ft.Control] = [ft.Text(label, size=FONT_SIZE_MD, color=COLORS["muted"])]
    if caption:
        rows.append(ft.Text(caption, size=FONT_SIZE_MD - 2, color=COLORS["muted"]))
    rows.extend([
        ft.Text(time_value, size=FONT_SIZE_2XL, weight="bold"),
        ft.Text(money, size=FONT_SIZE_LG, color=COLORS["green"]),
    ])
    return ft.Container(
        content=ft.Column(rows, spacing=2),
        bgcolor=COLORS["bg"],
        padding=PADDING_LG,
        border_radius=BORDER_RADIUS,
        expand=True,
    )


class ClientTimerCard(ft.Container):
    def __init__(self, ctrl: UIController, stats: StatsService) -> None:
        self._ctrl = ctrl
        self._stats = stats
        self.client: Optional[Client] = None
        super().__init__(
            bgcolor=COLORS["card"],
            padding=PADDING_2XL,
            border_radius=BORDER_RADIUS,
            expand=True,
        )

    def show(self, client: Optional[Client], now: Optional[datetime] = None) -> None:
        """Render the card for a client, or the empty placeholder."""
        self.client = client
        if client is None:
            self.content = ft.Column(
                [
                    ft.Icon(ft.Icons.TIMER_OUTLINED, size=48, color=COLORS["muted"]),
                    ft.Text(t("select_or_add_client"), size=FONT_SIZE_LG, color=COLORS["muted"]),
                ],
                horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                alignment=ft.MainAxisAlignment.CENTER,
            )
            return

        now = now or datetime.now().astimezone()
        summary = self._stats.summarize(client, now)
        self.content = ft.Column(
            [
                self._build_header(client),
                self._build_clock(client, now),
                self._build_summary(summary),
                self._build_today(client, now),
            ],
            spacing=SPACING_LG,
            scroll=ft.ScrollMode.AUTO,
        )

    def tick(self, now: Optional[datetime] = None) -> None:
        """Refresh only while the shown client has a running session."""
        if self.client is not None and self.client.has_active_timer:
            self.show(self.client, now)

    def _build_header(self, client: Client) -> ft.Control:
        controls: List[ft.Control] = [
            ft.Text(client.name, size=FONT_SIZE_3XL, weight="bold"),
        ]
        if client.has_active_timer:
            controls.append(ft.Container(
                content=ft.Text(t("active"), size=FONT_SIZE_MD, color=COLORS["white"]),
                bgcolor=COLORS["green"],
                padding=ft.Padding.symmetric(horizontal=8, vertical=2),
                border_radius=BORDER_RADIUS,
            ))
        if client.archived:
            controls.append(ft.Text(t("archived"), size=FONT_SIZE_MD, color=COLORS["muted"]))
        return ft.Column(
            [
                ft.Row(controls, spacing=SPACING_MD),
                ft.Text(TimeFormatter.rate(client.hourly_rate), size=FONT_SIZE_LG, color=COLORS["muted"]),
            ],
            spacing=2,
        )

    def _build_clock(self, client: Client, now: datetime) -> ft.Control:
        active = client.active_entry
        running_ms = elapsed_ms(active, now) if active else 0
        if active:
            toggle = danger_btn(t("stop"), lambda e: self._ctrl.stop_timer(client.id), icon=ft.Icons.STOP)
        else:
            toggle = accent_btn(t("start"), lambda e: self._ctrl.start_timer(client.id), icon=ft.Icons.PLAY_ARROW)
        reset = ft.IconButton(
            icon=ft.Icons.RESTART_ALT,
            icon_color=COLORS["muted"],
            tooltip=t("reset_time_tooltip"),
            disabled=active is not None,
            on_click=lambda e: self._ctrl.confirm_reset_time(client.id),
        )
        return ft.Row(
            [
                ft.Text(TimeFormatter.format_time(running_ms), size=FONT_SIZE_TIMER, weight="bold",
                        font_family="monospace"),
                ft.Container(expand=True),
                toggle,
                reset,
            ],
            vertical_alignment=ft.CrossAxisAlignment.CENTER,
        )

    def _build_summary(self, summary: ClientSummary) -> ft.Control:
        return ft.Column(
            [
                ft.Row(
                    [
                        _stat_tile(t("total_time"), TimeFormatter.format_time(summary.total_ms),
                                   TimeFormatter.currency(summary.total_earnings)),
                    ],
                ),
                ft.Row(
                    [
                        _stat_tile(t("this_week"), TimeFormatter.format_time(summary.week_ms),
                                   TimeFormatter.currency(summary.week_earnings), summary.week_label),
                        _stat_tile(t("this_month"), TimeFormatter.format_time(summary.month_ms),
                                   TimeFormatter.currency(summary.month_earnings), summary.month_label),
                    ],
                    spacing=SPACING_LG,
                ),
            ],
            spacing=SPACING_LG,
        )

    def _build_today(self, client: Client, now: datetime) -> ft.Control:
        entries = self._stats.today_entries(client, now)
        if not entries:
            return ft.Container()
        rows: List[ft.Control] = [ft.Text(t("todays_sessions"), size=FONT_SIZE_LG, weight="bold")]
        for item in entries:
            details: List[ft.Control] = [
                ft.Text(f"{item.start_label} - {item.end_label}", size=FONT_SIZE_MD),
                ft.Text(item.duration, size=FONT_SIZE_MD, weight="bold"),
                ft.Text(TimeFormatter.currency(item.earnings), size=FONT_SIZE_MD, color=COLORS["green"]),
            ]
            column: List[ft.Control] = [ft.Row(details, spacing=SPACING_LG)]
            if item.notes:
                column.append(ft.Text(item.notes, size=FONT_SIZE_MD, color=COLORS["muted"]))
            rows.append(ft.Container(
                content=ft.Row(
                    [
                        ft.Column(column, spacing=2, expand=True),
                        ft.IconButton(
                            icon=ft.Icons.DELETE_OUTLINE,
                            icon_size=ICON_SIZE_SM,
                            icon_color=COLORS["danger"],
                            tooltip=t("delete_entry"),
                            on_click=lambda e, i=item: self._ctrl.confirm_delete_entry(i.id, i.duration_ms),
                        ),
                    ],
                ),
                bgcolor=COLORS["bg"],
                padding=PADDING_LG,
                border_radius=BORDER_RADIUS,
            ))
        return ft.Column(rows, spacing=SPACING_MD)
