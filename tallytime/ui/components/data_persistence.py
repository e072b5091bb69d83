import flet as ft
import logging
from datetime import datetime
from typing import Callable, Optional

from api import TallyAPI
from config import COLORS, SPACING_MD
from i18n import t
from services.export_service import backup_filename, csv_filename, monthly_filename
from ui.controller import UIController
from ui.helpers import outline_btn

logger = logging.getLogger(__name__)


class DataPersistenceBar(ft.Row):
    """Export JSON / Export CSV / Monthly Report / Import Clients / Reset."""

    def __init__(self, page: ft.Page, api: TallyAPI, ctrl: UIController) -> None:
        self._page = page
        self.api = api
        self._ctrl = ctrl
        self._picker: Optional[ft.FilePicker] = None
        super().__init__(
            controls=[
                outline_btn(t("export_json"), self._on_export_json, icon=ft.Icons.DOWNLOAD),
                outline_btn(t("export_csv"), self._on_export_csv, icon=ft.Icons.TABLE_CHART),
                outline_btn(t("monthly_report"), self._on_export_monthly, icon=ft.Icons.CALENDAR_MONTH),
                outline_btn(t("import_clients"), ctrl.open_import, icon=ft.Icons.UPLOAD),
                ft.TextButton(
                    t("reset"),
                    icon=ft.Icons.DELETE_FOREVER,
                    style=ft.ButtonStyle(color=COLORS["danger"]),
                    on_click=ctrl.confirm_reset_data,
                ),
            ],
            wrap=True,
            spacing=SPACING_MD,
        )

    def _get_picker(self) -> ft.FilePicker:
        """The bar's single save dialog service, registered with the page on first use."""
        if self._picker is None:
            self._picker = ft.FilePicker()
        if not any(service is self._picker for service in self._page.services):
            self._page.services.append(self._picker)
            self._page.update()
        return self._picker

    def _save(self, filename: str, extension: str, render: Callable[[], str], done_message: str) -> None:
        """Ask for a destination and write the rendered export there."""
        async def _do_save() -> None:
            path = await self._get_picker().save_file(
                dialog_title=t("save_export"),
                file_name=filename,
                file_type=ft.FilePickerFileType.CUSTOM,
                allowed_extensions=[extension],
            )
            if not path:
                return
            try:
                data = render()
                with open(path, "w", encoding="utf-8", newline="") as f:
                    f.write(data)
            except OSError as ex:
                logger.error(f"Export to {path} failed: {ex}")
                self._ctrl.snack.error(f"{t('export_failed')}: {ex}")
                return
            logger.info(f"Exported {filename} to {path}")
            self._ctrl.snack.success(done_message)

        self._page.run_task(_do_save)

    def _on_export_json(self, e: ft.ControlEvent) -> None:
        now = datetime.now().astimezone()
        self._save(backup_filename(now), "json", lambda: self.api.export_json(now), t("data_exported"))

    def _on_export_csv(self, e: ft.ControlEvent) -> None:
        now = datetime.now().astimezone()
        self._save(csv_filename(now), "csv", self.api.export_csv, t("csv_exported"))

    def _on_export_monthly(self, e: ft.ControlEvent) -> None:
        now = datetime.now().astimezone()
        message = t("monthly_exported").format(month=now.strftime("%B %Y"))
        self._save(monthly_filename(now), "csv", lambda: self.api.export_monthly_csv(now), message)
