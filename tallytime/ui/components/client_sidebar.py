"""Client sidebar - search, active/archived toggle, add button and the client list.

Each row shows the client's name and rate, a dot while its timer runs, and a
menu with edit / archive-restore / delete. Clicking a row selects the client.
"""
import flet as ft
from typing import List

from config import (
    COLORS, BORDER_RADIUS, FONT_SIZE_MD, FONT_SIZE_LG, FONT_SIZE_XL, ICON_SIZE_SM,
    PADDING_LG, PADDING_XL, SIDEBAR_WIDTH, SPACING_MD, SPACING_SM,
)
from formatters import TimeFormatter
from i18n import t
from models.entities import AppState, Client
from ui.controller import UIController
from ui.dialogs.base import create_option_item


class ClientSidebarItem(ft.Container):
    def __init__(self, client: Client, selected: bool, ctrl: UIController) -> None:
        self.client = client
        self._ctrl = ctrl
        name_row: List[ft.Control] = [
            ft.Text(client.name, size=FONT_SIZE_LG, weight="bold", expand=True,
                    max_lines=1, overflow=ft.TextOverflow.ELLIPSIS),
        ]
        if client.has_active_timer:
            name_row.insert(0, ft.Container(width=8, height=8, border_radius=4, bgcolor=COLORS["green"]))

        menu = ft.PopupMenuButton(
            icon=ft.Icons.MORE_VERT,
            icon_size=ICON_SIZE_SM,
            items=[
                create_option_item(ft.Icons.EDIT, t("edit_client"), self._on_edit, as_popup=True),
                create_option_item(
                    ft.Icons.UNARCHIVE if client.archived else ft.Icons.ARCHIVE,
                    t("restore_client") if client.archived else t("archive_client"),
                    self._on_archive,
                    as_popup=True,
                ),
                create_option_item(
                    ft.Icons.DELETE_OUTLINE, t("delete_client"), self._on_delete,
                    color=COLORS["danger"], as_popup=True,
                ),
            ],
        )
        super().__init__(
            content=ft.Row(
                [
                    ft.Column(
                        [
                            ft.Row(name_row, spacing=SPACING_MD),
                            ft.Text(TimeFormatter.rate(client.hourly_rate), size=FONT_SIZE_MD,
                                    color=COLORS["muted"]),
                        ],
                        spacing=2,
                        expand=True,
                    ),
                    menu,
                ],
            ),
            padding=ft.Padding.only(left=PADDING_LG, top=PADDING_LG // 2, bottom=PADDING_LG // 2),
            border_radius=BORDER_RADIUS,
            bgcolor=COLORS["selected"] if selected else None,
            on_click=self._on_select,
            ink=True,
        )

    def _on_select(self, e: ft.ControlEvent) -> None:
        self._ctrl.select_client(self.client.id)

    def _on_edit(self, e: ft.ControlEvent) -> None:
        self._ctrl.open_edit_client(self.client.id)

    def _on_archive(self, e: ft.ControlEvent) -> None:
        self._ctrl.toggle_archive(self.client.id)

    def _on_delete(self, e: ft.ControlEvent) -> None:
        self._ctrl.confirm_delete_client(self.client.id)


class ClientSidebar(ft.Container):
    def __init__(self, state: AppState, ctrl: UIController) -> None:
        self.state = state
        self._ctrl = ctrl
        self._search = ft.TextField(
            hint_text=t("search_clients"),
            prefix_icon=ft.Icons.SEARCH,
            dense=True,
            border_color=COLORS["border"],
            bgcolor=COLORS["input_bg"],
            border_radius=8,
            on_change=self._on_search,
        )
        self._toggle = ft.SegmentedButton(
            selected=["active"],
            on_change=self._on_toggle,
            segments=[
                ft.Segment(value="active", label=ft.Text("")),
                ft.Segment(value="archived", label=ft.Text("")),
            ],
        )
        self._items = ft.Column(spacing=SPACING_SM, scroll=ft.ScrollMode.AUTO, expand=True)
        self._empty = ft.Text("", color=COLORS["muted"], size=FONT_SIZE_MD, visible=False)
        super().__init__(
            width=SIDEBAR_WIDTH,
            bgcolor=COLORS["sidebar"],
            padding=PADDING_XL,
            content=ft.Column(
                [
                    ft.Row(
                        [
                            ft.Text(t("clients"), size=FONT_SIZE_XL, weight="bold", expand=True),
                            ft.IconButton(
                                icon=ft.Icons.ADD,
                                icon_color=COLORS["accent"],
                                tooltip=t("add_client"),
                                on_click=ctrl.open_add_client,
                            ),
                        ],
                    ),
                    self._search,
                    self._toggle,
                    self._empty,
                    self._items,
                ],
                spacing=SPACING_MD,
                expand=True,
            ),
        )
        self.refresh()

    def _on_search(self, e: ft.ControlEvent) -> None:
        self._ctrl.set_search(e.control.value or "")

    def _on_toggle(self, e: ft.ControlEvent) -> None:
        self._ctrl.set_show_archived("archived" in self._toggle.selected)

    def refresh(self) -> None:
        """Rebuild counts and rows from state."""
        self._toggle.segments[0].label = ft.Text(f"{t('active')} ({self.state.active_count})")
        self._toggle.segments[1].label = ft.Text(f"{t('archived')} ({self.state.archived_count})")
        self._toggle.selected = ["archived" if self.state.show_archived else "active"]

        clients = self.state.filtered_clients()
        self._items.controls = [
            ClientSidebarItem(c, c.id == self.state.selected_client_id, self._ctrl)
            for c in clients
        ]
        if not clients:
            if self.state.search_query:
                self._empty.value = t("no_matching_clients")
            elif self.state.show_archived:
                self._empty.value = t("no_archived_clients")
            else:
                self._empty.value = t("no_clients_yet")
        self._empty.visible = not clients
