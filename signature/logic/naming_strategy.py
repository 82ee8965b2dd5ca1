from __future__ import annotations

SIGNED_PREFIX = "[SIGNED] "


def signed_file_name(file_name: str) -> str:
    """Download name of a signed copy: ``contract.pdf`` -> ``[SIGNED] contract.pdf``."""
    if file_name.startswith(SIGNED_PREFIX):
        return file_name
    return f"{SIGNED_PREFIX}{file_name}"
