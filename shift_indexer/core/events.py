"""
Typed on-chain log events as delivered to the projection engine.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Generator, Optional, Union

from shift_indexer.exceptions import EventDecodeError
from shift_indexer.utils.chain_utils import to_bool, to_datetime, to_int

_MISSING = object()


@dataclass(frozen=True)
class ChainEvent:
    """A decoded contract log event plus the block/transaction context."""
    name: str
    args: Dict[str, Any]
    timestamp: datetime
    block_number: Optional[int] = None
    log_index: Optional[int] = None
    transaction_hash: Optional[str] = None
    contract: Optional[str] = None
    tx_from: Optional[str] = None
    chain_id: Optional[int] = None
    raw_data: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def arg(self, name: str, default: Any = _MISSING) -> Any:
        """
        Get a decoded event argument.

        Args:
            name: Argument name as declared in the contract ABI
            default: Value returned when the argument is absent

        Returns:
            Argument value

        Raises:
            EventDecodeError: If the argument is absent and no default is given
        """
        if name in self.args:
            return self.args[name]
        if default is not _MISSING:
            return default
        raise EventDecodeError(f"{self.name} event is missing argument '{name}'")

    def int_arg(self, name: str) -> int:
        return to_int(self.arg(name), name)

    def bool_arg(self, name: str, default: Any = _MISSING) -> bool:
        return to_bool(self.arg(name, default), name)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ChainEvent':
        """
        Build an event from the dict shape a log scraper yields.

        Accepts both snake_case keys (``event_name``, ``block_number``) and the
        camelCase keys of raw web3 logs (``event``, ``blockNumber``).
        """
        name = data.get('event_name') or data.get('event') or data.get('name')
        if not name:
            raise EventDecodeError(f"Event has no name: {data!r}")

        timestamp = _first(data, 'timestamp', 'block_time', 'blockTime')
        if timestamp is None:
            raise EventDecodeError(f"{name} event has no block time")

        args = data.get('args') or {}
        if not isinstance(args, dict):
            args = dict(args)

        block_number = _first(data, 'block_number', 'blockNumber')
        log_index = _first(data, 'log_index', 'logIndex')
        chain_id = _first(data, 'chain_id', 'chainId')
        tx_hash = _first(data, 'transaction_hash', 'transactionHash')
        if tx_hash is not None and not isinstance(tx_hash, str):
            tx_hash = tx_hash.hex()

        return cls(
            name=name,
            args=args,
            timestamp=to_datetime(timestamp),
            block_number=to_int(block_number, 'block_number') if block_number is not None else None,
            log_index=to_int(log_index, 'log_index') if log_index is not None else None,
            transaction_hash=tx_hash,
            contract=_first(data, 'contract', 'contract_address', 'address'),
            tx_from=_first(data, 'tx_from', 'from'),
            chain_id=to_int(chain_id, 'chain_id') if chain_id is not None else None,
            raw_data=dict(data)
        )


def _first(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def load_events(path: Union[str, Path]) -> Generator[ChainEvent, None, None]:
    """
    Read events from a JSON-lines dump, one event object per line.

    Blank lines are skipped.

    Raises:
        EventDecodeError: If a line is not valid JSON or not a valid event
    """
    path = Path(path)
    with open(path, 'r') as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                data = json.loads(line)
            except json.JSONDecodeError as e:
                raise EventDecodeError(f"{path}:{line_no}: invalid JSON: {e}") from e
            yield ChainEvent.from_dict(data)
