"""
Sanitization of user-provided text before it reaches logs or AI prompts.

Column names and cell values come straight from uploaded data.
"""
import re
from typing import Any

_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f-\x9f]')
_LINE_BREAKS = re.compile(r'[\r\n]')

PROMPT_INJECTION_PATTERNS = ['SYSTEM:', 'USER:', 'ASSISTANT:', 'IGNORE', 'FORGET', 'NEW INSTRUCTION']


def sanitize_for_logging(value: Any, max_length: int = 500) -> str:
    """
    Sanitize value for safe logging (prevents log injection).

    Args:
        value: Value to sanitize
        max_length: Maximum length

    Returns:
        Sanitized value safe for logging
    """
    if value is None or value == "":
        return ""

    value = str(value)

    # Remove newlines and carriage returns
    value = _LINE_BREAKS.sub(' ', value)

    # Remove other control characters
    value = _CONTROL_CHARS.sub('', value)

    if len(value) > max_length:
        value = value[:max_length] + "..."

    return value


def sanitize_for_prompt(value: Any, max_length: int = 100) -> str:
    """
    Sanitize user-provided text before including it in an AI prompt.

    Strips newlines and control characters, limits length, and brackets
    phrases that read like role or override instructions.
    """
    if value is None:
        return ""

    text = str(value)
    if not text:
        return ""

    sanitized = ''.join(char for char in text if char.isprintable() and char not in '\n\r\t')

    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length] + "..."

    for pattern in PROMPT_INJECTION_PATTERNS:
        sanitized = sanitized.replace(pattern, f'[{pattern}]')

    return sanitized
