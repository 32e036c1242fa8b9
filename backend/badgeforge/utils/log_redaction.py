"""Utility for redacting sensitive data from logs."""

import re
from typing import Any

REDACTED = "***REDACTED***"

_SENSITIVE_KEYS = {
    "access_token",
    "refresh_token",
    "id_token",
    "code_verifier",
    "client_secret",
    "authorization",
    "password",
    "secret",
    "token",
}


def sanitize_for_log(value: Any, max_length: int = 200) -> str:
    """Neutralize control characters so a value cannot forge log lines.

    Args:
        value: Value to render (usually attacker-controlled, e.g. a query param)
        max_length: Truncate the rendered value beyond this many characters

    Returns:
        Single-line string safe to interpolate into a log message
    """
    text = str(value)
    text = text.replace("\r\n", " ").replace("\r", " ").replace("\n", " ").replace("\t", " ")
    if len(text) > max_length:
        text = text[:max_length] + "..."
    return text


def redact_sensitive_data(data: Any) -> Any:
    """
    Recursively redact sensitive data from various data structures.

    Redacts:
    - Values whose key names look like tokens, secrets or verifiers
    - Bearer/Basic credentials and token-bearing query params inside strings

    Args:
        data: Data to redact (dict, list, str, or primitive)

    Returns:
        Redacted copy of data
    """
    if isinstance(data, dict):
        return {
            k: REDACTED if str(k).lower() in _SENSITIVE_KEYS else redact_sensitive_data(v)
            for k, v in data.items()
        }
    elif isinstance(data, list):
        return [redact_sensitive_data(item) for item in data]
    elif isinstance(data, str):
        return _redact_string(data)
    else:
        return data


def _redact_string(text: str) -> str:
    """
    Redact patterns in strings that look like secrets.

    Patterns redacted:
    - Bearer tokens: "Bearer abc123..." -> "Bearer ***REDACTED***"
    - Basic auth: "Basic abc123..." -> "Basic ***REDACTED***"
    - Tokens in query/form strings: "code_verifier=xyz" -> "code_verifier=***REDACTED***"
    - JSON with sensitive keys: {"access_token": "foo"} -> {"access_token": "***REDACTED***"}
    """
    text = re.sub(r"(Bearer\s+)[A-Za-z0-9_\-\.~+/=]+", rf"\1{REDACTED}", text, flags=re.IGNORECASE)
    text = re.sub(r"(Basic\s+)[A-Za-z0-9+/=]+", rf"\1{REDACTED}", text, flags=re.IGNORECASE)
    text = re.sub(
        r"((?:^|[?&\s])(?:access_token|refresh_token|code_verifier|client_secret|code)=)[^&\s]+",
        rf"\1{REDACTED}",
        text,
        flags=re.IGNORECASE,
    )
    text = re.sub(
        r'("(?:access_token|refresh_token|id_token|client_secret|code_verifier|token)":\s*")[^"]*(")',
        rf"\1{REDACTED}\2",
        text,
        flags=re.IGNORECASE,
    )
    return text
