"""Internationalization of the messages shown in place of a thumbnail."""
import os


# Translation strings for each supported language
STRINGS = {
    "en": {
        "file_missing": "File doesn't exist",
        "error": "Error {code}",
    },
    "no": {  # Norwegian
        "file_missing": "Filen finnes ikke",
        "error": "Feil {code}",
    },
}


def get_locale() -> str:
    """Get the display language code.

    Messages are English unless EASYTHUMB_LANG names another language.
    The host locale is not consulted.

    Returns:
        Two-letter language code (e.g., 'en', 'no')
    """
    env_lang = os.environ.get("EASYTHUMB_LANG")
    if env_lang:
        return env_lang.lower()[:2]
    return "en"


# Global current language
_current_lang = get_locale()


def set_language(lang_code: str) -> None:
    """Set the current language, falling back to English if unsupported.

    Args:
        lang_code: Two-letter language code (e.g., 'en', 'no')
    """
    global _current_lang
    if lang_code in STRINGS:
        _current_lang = lang_code
    else:
        _current_lang = "en"


def get_text(key: str, **kwargs) -> str:
    """Get the display string for a key in the current language.

    Args:
        key: Translation key
        **kwargs: Format string parameters

    Returns:
        Translated and formatted string, English if the current language
        lacks it, the key itself if no language has it
    """
    text = STRINGS.get(_current_lang, {}).get(key) or STRINGS["en"].get(key, key)
    try:
        return text.format(**kwargs)
    except (KeyError, IndexError, ValueError):
        return text


# Convenience alias (common i18n pattern)
_ = get_text
