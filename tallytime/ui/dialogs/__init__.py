from .base import open_dialog, open_confirm_dialog, create_option_item
from .client_dialogs import ClientDialogs
from .import_dialog import open_import_dialog
from .note_dialog import open_note_dialog
