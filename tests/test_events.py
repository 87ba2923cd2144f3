"""
Unit tests for event decoding.
"""

import json
from datetime import datetime, timezone

import pytest

from shift_indexer.core.events import ChainEvent, load_events
from shift_indexer.exceptions import EventDecodeError
from shift_indexer.utils.chain_utils import (
    MAX_OPTIONS,
    description_hash,
    option_range,
    to_bool,
    to_datetime,
    to_hex,
    to_int,
)


def test_from_scraper_dict():
    """Test the snake_case shape yielded by a log scraper."""
    event = ChainEvent.from_dict({
        'event_name': 'RequestCreated',
        'args': {'requestId': 7},
        'block_number': 100,
        'log_index': 2,
        'timestamp': 1000,
        'transaction_hash': '0xabc',
        'contract_address': '0xRequestHub'
    })

    assert event.name == 'RequestCreated'
    assert event.timestamp == datetime(1970, 1, 1, 0, 16, 40, tzinfo=timezone.utc)
    assert event.block_number == 100
    assert event.log_index == 2
    assert event.contract == '0xRequestHub'
    assert event.arg('requestId') == 7


def test_from_web3_style_dict():
    """Test camelCase keys and bytes transaction hashes."""
    event = ChainEvent.from_dict({
        'event': 'VoteCast',
        'args': {'proposalId': 1},
        'blockNumber': 5,
        'logIndex': 0,
        'blockTime': 2000,
        'transactionHash': bytes.fromhex('ab'),
        'from': '0xSender'
    })

    assert event.name == 'VoteCast'
    assert event.block_number == 5
    assert event.transaction_hash == 'ab'
    assert event.tx_from == '0xSender'


def test_missing_name_or_time():
    """Test undecodable events raise EventDecodeError."""
    with pytest.raises(EventDecodeError):
        ChainEvent.from_dict({'args': {}, 'timestamp': 1})
    with pytest.raises(EventDecodeError):
        ChainEvent.from_dict({'event_name': 'VoteCast', 'args': {}})


def test_missing_argument():
    """Test required arguments raise and defaults are honored."""
    event = ChainEvent.from_dict({'event_name': 'VoteCast', 'args': {}, 'timestamp': 1})
    with pytest.raises(EventDecodeError):
        event.arg('voter')
    assert event.arg('voter', None) is None


def test_load_events(tmp_path):
    """Test JSON-lines loading skips blank lines."""
    path = tmp_path / 'events.jsonl'
    lines = [
        json.dumps({'event_name': 'RequestCreated', 'args': {'requestId': 1}, 'timestamp': 10}),
        '',
        json.dumps({'event_name': 'RequestCreated', 'args': {'requestId': 2}, 'timestamp': 20}),
    ]
    path.write_text('\n'.join(lines) + '\n')

    events = list(load_events(path))

    assert [e.arg('requestId') for e in events] == [1, 2]


def test_load_events_invalid_json(tmp_path):
    """Test invalid lines report their position."""
    path = tmp_path / 'events.jsonl'
    path.write_text('{not json}\n')

    with pytest.raises(EventDecodeError, match='events.jsonl:1'):
        list(load_events(path))


def test_value_helpers():
    """Test decoding helpers for integers, bytes and hashes."""
    assert to_int('0x10') == 16
    assert to_int('42') == 42
    assert to_int(True) == 1
    with pytest.raises(EventDecodeError):
        to_int('abc')
    assert to_hex(b'\x12\x34') == '0x1234'
    assert to_hex('0xdead') == '0xdead'
    assert option_range(3) == [0, 1, 2]
    assert option_range(0) == []
    assert description_hash('') == (
        '0xc5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470'
    )
    assert description_hash(None) is None


def test_whole_floats_decode_as_integers():
    """Test JSON dumps that render block times as floats still decode."""
    assert to_int(1000.0) == 1000
    assert to_datetime(1000.0) == datetime(1970, 1, 1, 0, 16, 40, tzinfo=timezone.utc)
    with pytest.raises(EventDecodeError):
        to_int(1000.5)


def test_to_bool():
    """Test booleans decode from JSON-lines strings and 0/1."""
    assert to_bool(True) is True
    assert to_bool('false') is False
    assert to_bool('True') is True
    assert to_bool(0) is False
    assert to_bool('1') is True
    with pytest.raises(EventDecodeError):
        to_bool('maybe')
    with pytest.raises(EventDecodeError):
        to_bool(2)


def test_option_range_is_bounded():
    """Test option counts are limited to the uint8 range."""
    assert option_range(MAX_OPTIONS)[-1] == MAX_OPTIONS - 1
    with pytest.raises(EventDecodeError, match='numOptions'):
        option_range(2 ** 40)
    with pytest.raises(EventDecodeError):
        option_range(-1)
