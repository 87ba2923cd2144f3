"""
Unit tests for table models.
"""

import logging
from datetime import datetime, timezone

from shift_indexer.database.models import ENTITY_MODELS, Claim, Community
from shift_indexer.utils.logging_utils import setup_logging


def test_entity_registry():
    """Test every derived table is registered under its name."""
    assert set(ENTITY_MODELS) == {
        'communities', 'requests', 'comments', 'drafts', 'draft_versions',
        'draft_reviews', 'proposals', 'proposal_votes', 'claims', 'juror_assignments'
    }
    assert all('id' in model.__table__.columns for model in ENTITY_MODELS.values())


def test_to_json():
    """Test model serialization."""
    community = Community(
        id=1,
        chain_id=84532,
        name='Shift',
        metadata_uri=None,
        created_at=datetime(2021, 10, 1, tzinfo=timezone.utc)
    )

    json_data = community.to_json()

    assert json_data['id'] == 1
    assert json_data['name'] == 'Shift'
    assert json_data['created_at'] == 1633046400
    assert isinstance(json_data['created_at'], int)


def test_to_json_nullable_timestamps():
    """Test null timestamps serialize as None."""
    claim = Claim(id=9, community_id=1, valuable_action_id=2, claimant='0xW', status='PENDING',
                  submitted_at=datetime(2021, 10, 1, tzinfo=timezone.utc), resolved_at=None)
    assert claim.to_json()['resolved_at'] is None


def test_setup_logging_replaces_handler():
    """Test repeated setup does not stack handlers."""
    root = setup_logging('DEBUG')
    count = len(root.handlers)
    setup_logging(logging.INFO)

    assert len(root.handlers) == count
    assert root.level == logging.INFO
