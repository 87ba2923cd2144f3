"""
Helpers for normalizing decoded on-chain values.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence

from eth_utils import encode_hex, keccak

from shift_indexer.exceptions import EventDecodeError

# Option counts are declared uint8 by the governance contracts
MAX_OPTIONS = 255

_BOOL_STRINGS = {'true': True, 'false': False, '1': True, '0': False}


def normalize_address(address: Any) -> str:
    """
    Lowercase an address so differently-cased encodings compare equal.

    Unlike checksum validation this never rejects its input, which keeps
    identifier derivation total.
    """
    return str(address).lower()


def to_int(value: Any, name: str = 'value') -> int:
    """
    Convert a decoded uint/int argument to a Python int.

    Args:
        value: Decoded argument (int, whole float, decimal string, hex string or bool)
        name: Argument name used in the error message

    Returns:
        Integer value

    Raises:
        EventDecodeError: If the value is missing or not numeric
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        # JSON dumps may render block times as 1000.0
        if value.is_integer():
            return int(value)
        raise EventDecodeError(f"Invalid integer for {name}: {value!r}")
    if isinstance(value, str):
        text = value.strip()
        try:
            if text.lower().startswith('0x'):
                return int(text, 16)
            return int(text)
        except ValueError as e:
            raise EventDecodeError(f"Invalid integer for {name}: {value!r}") from e
    raise EventDecodeError(f"Invalid integer for {name}: {value!r}")


def to_bool(value: Any, name: str = 'value') -> bool:
    """Convert a decoded bool argument, accepting 0/1 and "true"/"false"."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in _BOOL_STRINGS:
        return _BOOL_STRINGS[value.strip().lower()]
    raise EventDecodeError(f"Invalid boolean for {name}: {value!r}")


def to_datetime(block_time: Any) -> datetime:
    """Convert block time in seconds since epoch to an aware UTC datetime."""
    if isinstance(block_time, datetime):
        if block_time.tzinfo is None:
            return block_time.replace(tzinfo=timezone.utc)
        return block_time.astimezone(timezone.utc)
    return datetime.fromtimestamp(to_int(block_time, 'timestamp'), tz=timezone.utc)


def to_hex(value: Any) -> str:
    """Render bytes-like calldata as a 0x-prefixed hex string."""
    if isinstance(value, (bytes, bytearray)):
        return encode_hex(bytes(value))
    if hasattr(value, 'hex') and not isinstance(value, str):
        text = value.hex()
        return text if text.startswith('0x') else f"0x{text}"
    return str(value)


def description_hash(description: Optional[str]) -> Optional[str]:
    """Keccak-256 of a proposal description, as the governor computes it."""
    if description is None:
        return None
    return encode_hex(keccak(text=description))


def option_range(num_options: Any) -> List[int]:
    """
    Index array [0..num_options) for a multi-choice proposal.

    Raises:
        EventDecodeError: If the count does not fit the contracts' uint8
    """
    count = to_int(num_options, 'numOptions')
    if not 0 <= count <= MAX_OPTIONS:
        raise EventDecodeError(f"numOptions must be between 0 and {MAX_OPTIONS}: {count}")
    return list(range(count))


def stringify_values(values: Sequence[Any]) -> List[str]:
    """Render uint256 call values as decimal strings for JSON storage."""
    return [str(to_int(v, 'values')) for v in values]
