"""Supported languages, UI strings and localized error messages."""

from enum import StrEnum

from ventapp.errors import ErrorKind, UnsupportedLanguageError


class Language(StrEnum):
    ZH = "zh"
    EN = "en"


DEFAULT_LANGUAGE = Language.ZH


def resolve_language(value: str | None) -> Language:
    """Map raw client input to a supported language.

    Absent or blank input falls back to DEFAULT_LANGUAGE. Anything else
    must name a supported language exactly (case and surrounding
    whitespace are ignored).

    Raises:
        UnsupportedLanguageError: If the value is not a supported code.
    """
    if value is None or not value.strip():
        return DEFAULT_LANGUAGE
    try:
        return Language(value.strip().lower())
    except ValueError:
        raise UnsupportedLanguageError(value) from None


TRANSLATIONS: dict[Language, dict[str, str]] = {
    Language.ZH: {
        "title": "一起吐槽吧",
        "input_placeholder": "想吐槽点什么？",
        "submit_button": "开始吐槽",
        "thinking": "正在思考...",
        "error_message": "抱歉，我现在有点累，晚点再聊？",
        "empty_complaint": "先说点什么吧。",
        "history_title": "历史记录",
        "history_empty": "还没有吐槽记录。",
        "history_cleared": "历史记录已清空。",
        "language_current": "当前语言：中文",
        "language_switch": "Switch to English",
    },
    Language.EN: {
        "title": "Let's Vent Together",
        "input_placeholder": "What's bothering you?",
        "submit_button": "Vent Now",
        "thinking": "Thinking...",
        "error_message": "Sorry, I'm a bit tired. Chat later?",
        "empty_complaint": "Say something first.",
        "history_title": "History",
        "history_empty": "No complaints yet.",
        "history_cleared": "History cleared.",
        "language_current": "Current language: English",
        "language_switch": "切换到中文",
    },
}

ERROR_MESSAGES: dict[Language, dict[ErrorKind, str]] = {
    Language.ZH: {
        ErrorKind.TIMEOUT: "对方想得有点久，稍后再试试吧。",
        ErrorKind.NETWORK_ERROR: "网络好像不太通畅，请检查连接后再试。",
        ErrorKind.API_ERROR: "AI 服务暂时不可用，晚点再聊？",
        ErrorKind.MALFORMED_RESPONSE: "抱歉，我没组织好语言，再说一次？",
        ErrorKind.UNKNOWN: "抱歉，我现在有点累，晚点再聊？",
    },
    Language.EN: {
        ErrorKind.TIMEOUT: "That took too long. Please try again in a moment.",
        ErrorKind.NETWORK_ERROR: (
            "The network seems unreachable. Check your connection and retry."
        ),
        ErrorKind.API_ERROR: "The AI service is unavailable right now. Chat later?",
        ErrorKind.MALFORMED_RESPONSE: (
            "Sorry, I lost my words. Could you say that again?"
        ),
        ErrorKind.UNKNOWN: "Sorry, I'm a bit tired. Chat later?",
    },
}

UNSUPPORTED_LANGUAGE_MESSAGE = "不支持的语言 / Unsupported language. Use one of: zh, en."


def translate(language: Language, key: str) -> str:
    """Look up a UI string for the given language."""
    return TRANSLATIONS[language][key]


def error_message(language: Language, kind: ErrorKind) -> str:
    """User-facing message for a failure category."""
    return ERROR_MESSAGES[language][kind]
