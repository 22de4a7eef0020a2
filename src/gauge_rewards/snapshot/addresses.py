from __future__ import annotations

from eth_utils import is_address, to_checksum_address


def normalize_address(raw_value: str, *, field_name: str) -> str:
    """Validate an EVM address and return its lower-case form."""
    candidate = raw_value.strip()
    if not candidate:
        raise ValueError(f"{field_name} is required")
    if not is_address(candidate):
        raise ValueError(f"{field_name} must be a valid EVM address")
    return candidate.lower()


def checksum_address(raw_value: str, *, field_name: str) -> str:
    return to_checksum_address(normalize_address(raw_value, field_name=field_name))
