"""
Internationalization (i18n) for console messages.

Provides translations for all user-facing messages in English (en) and German (de).
"""

from typing import Optional


SUPPORTED_LANGUAGES = frozenset({"en", "de"})
DEFAULT_LANGUAGE = "en"


# Structure: {message_key: {language_code: translated_message}}
TRANSLATIONS: dict[str, dict[str, str]] = {
    "cli.auditing": {
        "en": "Auditing {directory}",
        "de": "Prüfe {directory}",
    },
    "cli.directory_log_written": {
        "en": "Directory log written to {path}",
        "de": "Verzeichnis-Log geschrieben nach {path}",
    },
    "cli.audit_log_written": {
        "en": "Audit log written to {path}",
        "de": "Audit-Log geschrieben nach {path}",
    },
    "cli.previous_unreadable": {
        "en": "Can't read {path}. {error}",
        "de": "{path} kann nicht gelesen werden. {error}",
    },
    "cli.fatal_error": {
        "en": "Audit failed: {error}",
        "de": "Prüfung fehlgeschlagen: {error}",
    },
    "summary.issuers": {
        "en": "Issuers: {count} ({errors} with errors)",
        "de": "Aussteller: {count} ({errors} mit Fehlern)",
    },
    "summary.changes": {
        "en": "New issuers: {new}, deleted issuers: {deleted}, issuers with removed keys: {removed}",
        "de": "Neue Aussteller: {new}, entfernte Aussteller: {deleted}, Aussteller mit entfernten Schlüsseln: {removed}",
    },
    "summary.duplicates": {
        "en": "Duplicated kids: {kids}, duplicated iss: {iss}, duplicated names: {names}",
        "de": "Doppelte kids: {kids}, doppelte iss: {iss}, doppelte Namen: {names}",
    },
}


def get_message(
    key: str,
    language: Optional[str] = None,
    **kwargs,
) -> str:
    """
    Get a translated message by key.

    Args:
        key: The message key (e.g., 'cli.auditing')
        language: Language code ('en' or 'de'). Defaults to DEFAULT_LANGUAGE.
        **kwargs: Format arguments for the message template

    Returns:
        The translated and formatted message string.
        If the key is not found, returns the key itself.
        If the language is not found, falls back to DEFAULT_LANGUAGE.

    Examples:
        >>> get_message('cli.auditing', 'en', directory='https://example.org/dir.json')
        'Auditing https://example.org/dir.json'
    """
    if language is None or language not in SUPPORTED_LANGUAGES:
        language = DEFAULT_LANGUAGE

    translations = TRANSLATIONS.get(key)
    if translations is None:
        return key

    message = translations.get(language) or translations.get(DEFAULT_LANGUAGE)
    if message is None:
        return key

    if kwargs:
        try:
            message = message.format(**kwargs)
        except KeyError:
            # If formatting fails, return the unformatted message
            pass

    return message


def get_missing_translations(language: str) -> set[str]:
    """Get all message keys that are missing translations for a language."""
    return {key for key, translations in TRANSLATIONS.items() if language not in translations}
