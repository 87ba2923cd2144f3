"""
Shared fixtures for projection tests.
"""

import pytest

from shift_indexer.core import ChainEvent, ProjectionContext, Projector
from shift_indexer.database import DatabaseManager
from shift_indexer.utils.chain_utils import to_datetime


def make_event(name, t=0, /, **args):
    """Build a decoded event at block time ``t``."""
    tx_from = args.pop('tx_from', None)
    return ChainEvent(name=name, args=args, timestamp=to_datetime(t), tx_from=tx_from)


@pytest.fixture
def context():
    return ProjectionContext(chain_id=84532, default_community_id=1)


@pytest.fixture
def store():
    """In-memory derived store."""
    manager = DatabaseManager({'database': {'url': 'sqlite://'}})
    yield manager
    manager.dispose()


@pytest.fixture
def projector(store, context):
    return Projector(store, context)


@pytest.fixture
def event():
    return make_event
