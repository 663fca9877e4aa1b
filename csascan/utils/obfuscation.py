"""
Masking of sensitive values before they reach logs or the service.
"""

from typing import Any, Dict, Iterable, List

REPLACEMENT = "*********"

SENSITIVE_KEYS = ("api_key",)
SENSITIVE_FLAGS = ("--api-key", "--apiKey")


def obfuscate_properties(
    dictionary: Dict[str, Any],
    properties: Iterable[str] = SENSITIVE_KEYS,
    replacement: str = REPLACEMENT,
) -> Dict[str, Any]:
    """Return a copy of dictionary with the given keys masked, recursing into nested dicts."""
    properties = set(properties)
    result = {}
    for key, value in dictionary.items():
        if key in properties and value is not None:
            result[key] = replacement
        elif isinstance(value, dict):
            result[key] = obfuscate_properties(value, properties, replacement)
        else:
            result[key] = value
    return result


def obfuscate_command_line(
    argv: List[str],
    flags: Iterable[str] = SENSITIVE_FLAGS,
    replacement: str = REPLACEMENT,
) -> str:
    """Join argv into one string with the values of sensitive flags masked.

    Handles both ``--flag value`` and ``--flag=value`` forms.
    """
    flags = tuple(flags)
    masked = []
    mask_next = False
    for arg in argv:
        if mask_next:
            masked.append(replacement)
            mask_next = False
            continue

        name, sep, _ = arg.partition("=")
        if name in flags:
            if sep:
                masked.append(f"{name}={replacement}")
            else:
                masked.append(arg)
                mask_next = True
        else:
            masked.append(arg)
    return " ".join(masked)
