"""Internationalization module - provides t("key") for translated strings.

All user-facing text must use t("key") to support multiple languages (EN/RO).
Add new translations to _TRANSLATIONS dict with both "en" and "ro" values.
"""
import os
from typing import Dict

_current_language: str = "en"

LANGUAGES: Dict[str, Dict[str, str]] = {
    "en": {"name": "English", "flag": "🇺🇸", "code": "EN"},
    "ro": {"name": "Română", "flag": "🇷🇴", "code": "RO"},
}

_TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "app_title": {"en": "Client Time Tracker", "ro": "Pontaj clienți"},
    "loading": {"en": "Loading...", "ro": "Se încarcă..."},

    # Common buttons
    "cancel": {"en": "Cancel", "ro": "Anulează"},
    "save": {"en": "Save", "ro": "Salvează"},
    "delete": {"en": "Delete", "ro": "Șterge"},
    "reset": {"en": "Reset", "ro": "Resetează"},
    "skip": {"en": "Skip", "ro": "Sari peste"},
    "import": {"en": "Import", "ro": "Importă"},
    "start": {"en": "Start", "ro": "Pornește"},
    "stop": {"en": "Stop", "ro": "Oprește"},
    "logout": {"en": "Logout", "ro": "Deconectare"},
    "please_try_again": {"en": "Please try again.", "ro": "Te rugăm să încerci din nou."},

    # Configuration
    "configuration_required": {"en": "Configuration required", "ro": "Configurare necesară"},
    "configuration_help": {
        "en": "Set these variables in the environment or in a .env file next to the app, then restart:",
        "ro": "Setează aceste variabile în mediu sau într-un fișier .env lângă aplicație, apoi repornește:",
    },

    # Auth
    "login": {"en": "Login", "ro": "Autentificare"},
    "register": {"en": "Register", "ro": "Înregistrare"},
    "create_account": {"en": "Create an account", "ro": "Creează un cont"},
    "email": {"en": "Email", "ro": "Email"},
    "email_hint": {"en": "you@example.com", "ro": "tu@exemplu.ro"},
    "password": {"en": "Password", "ro": "Parolă"},
    "full_name": {"en": "Full name", "ro": "Nume complet"},
    "confirm_password": {"en": "Confirm password", "ro": "Confirmă parola"},
    "new_password": {"en": "New password", "ro": "Parolă nouă"},
    "forgot_password": {"en": "Forgot your password?", "ro": "Ai uitat parola?"},
    "need_account": {"en": "Need an account? Register", "ro": "Nu ai cont? Înregistrează-te"},
    "have_account": {"en": "Already have an account? Login", "ro": "Ai deja cont? Autentifică-te"},
    "back_to_login": {"en": "Back to login", "ro": "Înapoi la autentificare"},
    "login_failed": {"en": "Login failed", "ro": "Autentificare eșuată"},
    "registration_failed": {"en": "Registration failed", "ro": "Înregistrare eșuată"},
    "check_email_to_confirm": {
        "en": "Account created. Check your email to confirm it, then log in.",
        "ro": "Cont creat. Verifică emailul pentru confirmare, apoi autentifică-te.",
    },
    "reset_password": {"en": "Reset password", "ro": "Resetare parolă"},
    "reset_request_help": {
        "en": "Enter your email and we'll send you a link to reset your password.",
        "ro": "Introdu emailul și îți vom trimite un link pentru resetarea parolei.",
    },
    "send_reset_link": {"en": "Send reset link", "ro": "Trimite linkul"},
    "reset_email_sent": {
        "en": "Reset email sent. Check your inbox for the reset link.",
        "ro": "Email trimis. Verifică inboxul pentru linkul de resetare.",
    },
    "reset_request_failed": {"en": "Could not send the reset email", "ro": "Emailul de resetare nu a putut fi trimis"},
    "have_reset_link": {"en": "I already have a reset link", "ro": "Am deja un link de resetare"},
    "set_new_password": {"en": "Set New Password", "ro": "Setează parola nouă"},
    "set_new_password_help": {
        "en": "Paste the link from the reset email and enter your new password below.",
        "ro": "Lipește linkul din emailul de resetare și introdu parola nouă mai jos.",
    },
    "reset_link": {"en": "Reset link", "ro": "Link de resetare"},
    "reset_link_hint": {"en": "Paste the link from the email", "ro": "Lipește linkul din email"},
    "invalid_reset_link": {
        "en": "Invalid or expired reset link. Please request a new one.",
        "ro": "Link de resetare invalid sau expirat. Cere unul nou.",
    },
    "update_password": {"en": "Update password", "ro": "Actualizează parola"},
    "password_update_failed": {"en": "Error updating password", "ro": "Eroare la actualizarea parolei"},
    "password_updated": {"en": "Password updated successfully.", "ro": "Parola a fost actualizată."},
    "login_with_new_password": {
        "en": "You can now log in with your new password.",
        "ro": "Acum te poți autentifica cu parola nouă.",
    },

    # Sidebar
    "clients": {"en": "Clients", "ro": "Clienți"},
    "active": {"en": "Active", "ro": "Activi"},
    "archived": {"en": "Archived", "ro": "Arhivați"},
    "search_clients": {"en": "Search clients...", "ro": "Caută clienți..."},
    "add_client": {"en": "Add Client", "ro": "Adaugă client"},
    "archive_client": {"en": "Archive", "ro": "Arhivează"},
    "restore_client": {"en": "Restore", "ro": "Restaurează"},
    "no_matching_clients": {"en": "No clients match your search", "ro": "Niciun client nu corespunde căutării"},
    "no_archived_clients": {"en": "No archived clients", "ro": "Niciun client arhivat"},
    "no_clients_yet": {"en": "No clients yet. Add one to start tracking.", "ro": "Niciun client încă. Adaugă unul pentru a începe."},

    # Client dialogs
    "new_client": {"en": "New Client", "ro": "Client nou"},
    "edit_client": {"en": "Edit Client", "ro": "Editează clientul"},
    "client_name": {"en": "Client name", "ro": "Numele clientului"},
    "enter_client_name": {"en": "Enter client name", "ro": "Introdu numele clientului"},
    "hourly_rate": {"en": "Hourly rate", "ro": "Tarif orar"},
    "rate_per_hour": {"en": "Rate per hour ($)", "ro": "Tarif pe oră ($)"},
    "delete_client": {"en": "Delete Client", "ro": "Șterge clientul"},
    "delete_client_confirm": {
        "en": "Delete '{name}' and all of its time entries? This cannot be undone.",
        "ro": "Ștergi '{name}' și toate înregistrările de timp? Acțiunea nu poate fi anulată.",
    },
    "reset_time": {"en": "Reset Time", "ro": "Resetează timpul"},
    "reset_time_confirm": {
        "en": "Delete all tracked time for '{name}'? The client is kept.",
        "ro": "Ștergi tot timpul înregistrat pentru '{name}'? Clientul rămâne.",
    },
    "delete_entry": {"en": "Delete entry", "ro": "Șterge înregistrarea"},
    "delete_entry_confirm": {
        "en": "Delete this {duration} session?",
        "ro": "Ștergi această sesiune de {duration}?",
    },
    "client_added": {"en": "Client '{name}' added", "ro": "Clientul '{name}' a fost adăugat"},
    "client_updated": {"en": "Client updated", "ro": "Client actualizat"},
    "client_archived": {"en": "'{name}' archived", "ro": "'{name}' a fost arhivat"},
    "client_restored": {"en": "'{name}' restored", "ro": "'{name}' a fost restaurat"},
    "client_deleted": {"en": "Client deleted", "ro": "Client șters"},
    "time_reset": {"en": "Time reset", "ro": "Timp resetat"},

    # Timer card
    "select_or_add_client": {"en": "Select or add a client to start tracking", "ro": "Selectează sau adaugă un client"},
    "reset_time_tooltip": {"en": "Reset all time for this client", "ro": "Resetează tot timpul clientului"},
    "total_time": {"en": "Total Time", "ro": "Timp total"},
    "this_week": {"en": "This Week", "ro": "Săptămâna aceasta"},
    "this_month": {"en": "This Month", "ro": "Luna aceasta"},
    "todays_sessions": {"en": "Today's Sessions:", "ro": "Sesiunile de azi:"},
    "timer_started": {"en": "Timer started", "ro": "Cronometru pornit"},
    "timer_stopped": {"en": "Timer stopped", "ro": "Cronometru oprit"},
    "stop_timer_before_reset": {
        "en": "Please stop the active timer before resetting time.",
        "ro": "Oprește cronometrul activ înainte de resetare.",
    },
    "entry_deleted": {"en": "Entry deleted", "ro": "Înregistrare ștearsă"},

    # Notes
    "what_did_you_work_on": {"en": "What did you work on?", "ro": "La ce ai lucrat?"},
    "note_placeholder": {"en": "Describe the work you did...", "ro": "Descrie ce ai lucrat..."},
    "save_notes": {"en": "Save Notes", "ro": "Salvează notițele"},
    "note_added": {"en": "Note added", "ro": "Notiță adăugată"},

    # Data persistence
    "export_json": {"en": "Export JSON", "ro": "Export JSON"},
    "export_csv": {"en": "Export CSV", "ro": "Export CSV"},
    "monthly_report": {"en": "Monthly Report", "ro": "Raport lunar"},
    "import_clients": {"en": "Import Clients", "ro": "Importă clienți"},
    "save_export": {"en": "Save export", "ro": "Salvează exportul"},
    "data_exported": {"en": "Data exported", "ro": "Date exportate"},
    "csv_exported": {"en": "CSV exported", "ro": "CSV exportat"},
    "monthly_exported": {"en": "Report for {month} exported", "ro": "Raportul pentru {month} a fost exportat"},
    "export_failed": {"en": "Export failed", "ro": "Export eșuat"},
    "import_client_list": {"en": "Import Client List", "ro": "Importă lista de clienți"},
    "import_help": {
        "en": "Paste a JSON client list or CSV lines (Name,Rate). A header row is optional.",
        "ro": "Lipește o listă JSON de clienți sau linii CSV (Nume,Tarif). Antetul este opțional.",
    },
    "import_failed": {"en": "Import failed", "ro": "Import eșuat"},
    "clients_imported": {"en": "{count} clients imported.", "ro": "{count} clienți importați."},
    "duplicates_skipped": {"en": "{count} duplicates skipped.", "ro": "{count} duplicate ignorate."},
    "reset_data": {"en": "Reset All Data", "ro": "Resetează toate datele"},
    "reset_data_confirm": {
        "en": "Are you sure you want to reset all data? This will permanently delete all clients and time entries.",
        "ro": "Sigur vrei să resetezi toate datele? Toți clienții și înregistrările vor fi șterse definitiv.",
    },
    "data_reset_complete": {"en": "All data has been reset", "ro": "Toate datele au fost resetate"},

    # Error prefixes
    "error_loading_clients": {"en": "Error loading clients", "ro": "Eroare la încărcarea clienților"},
    "error_adding_client": {"en": "Error adding client", "ro": "Eroare la adăugarea clientului"},
    "error_updating_client": {"en": "Error updating client", "ro": "Eroare la actualizarea clientului"},
    "error_deleting_client": {"en": "Error deleting client", "ro": "Eroare la ștergerea clientului"},
    "error_resetting_time": {"en": "Error resetting time", "ro": "Eroare la resetarea timpului"},
    "error_starting_timer": {"en": "Error starting timer", "ro": "Eroare la pornirea cronometrului"},
    "error_stopping_timer": {"en": "Error stopping timer", "ro": "Eroare la oprirea cronometrului"},
    "error_saving_note": {"en": "Error saving note", "ro": "Eroare la salvarea notiței"},
    "error_deleting_entry": {"en": "Error deleting entry", "ro": "Eroare la ștergerea înregistrării"},
    "error_resetting_data": {"en": "Error resetting data", "ro": "Eroare la resetarea datelor"},
}


def get_language() -> str:
    """Get the current language code."""
    return _current_language


def set_language(lang: str) -> None:
    """Set the current language."""
    global _current_language
    if lang in LANGUAGES:
        _current_language = lang


def t(key: str) -> str:
    """Get translated string for the given key.

    Falls back to English if translation not found for current language.
    Falls back to the key itself if not found in any language.
    """
    if key not in _TRANSLATIONS:
        return key

    translations = _TRANSLATIONS[key]

    if _current_language in translations:
        return translations[_current_language]

    if "en" in translations:
        return translations["en"]

    return key


set_language(os.getenv("TALLYTIME_LANGUAGE", "en").lower())
