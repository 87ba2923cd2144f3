"""
Tests for the derived store's conflict policies and transactions.
"""

from datetime import timezone

import pandas as pd
import pytest

from shift_indexer.core import operations as ops
from shift_indexer.core.operations import UpsertPolicy
from shift_indexer.database import DatabaseManager, DatabaseUtils
from shift_indexer.exceptions import StoreError
from shift_indexer.utils.chain_utils import to_datetime


def _community(name, t=100):
    return {'chain_id': 84532, 'name': name, 'metadata_uri': None, 'created_at': to_datetime(t)}


def test_insert_or_update_overwrites(store):
    """Test the latest applied values are stored."""
    store.apply(ops.COMMUNITIES, 1, UpsertPolicy.INSERT_OR_UPDATE, _community('Old', 100))
    store.apply(ops.COMMUNITIES, 1, UpsertPolicy.INSERT_OR_UPDATE, _community('New', 50))

    community = store.get(ops.COMMUNITIES, 1)
    assert community.name == 'New'
    assert community.created_at == to_datetime(50)
    assert store.count(ops.COMMUNITIES) == 1


def test_insert_or_update_conflict_fields(store):
    """Test only the declared conflict fields change on conflict."""
    store.apply(ops.COMMUNITIES, 1, UpsertPolicy.INSERT_OR_UPDATE, _community('Old', 100))
    store.apply(
        ops.COMMUNITIES, 1, UpsertPolicy.INSERT_OR_UPDATE,
        _community('New', 200), conflict_fields={'name': 'New'}
    )

    community = store.get(ops.COMMUNITIES, 1)
    assert community.name == 'New'
    assert community.created_at == to_datetime(100)


def test_insert_or_ignore_keeps_first(store):
    """Test a differing second write is a no-op."""
    store.apply(ops.COMMUNITIES, 1, UpsertPolicy.INSERT_OR_IGNORE, _community('First'))
    store.apply(ops.COMMUNITIES, 1, UpsertPolicy.INSERT_OR_IGNORE, _community('Second'))

    assert store.get(ops.COMMUNITIES, 1).name == 'First'


def test_update_only_leaves_no_row(store):
    """Test update-only against a missing row creates nothing."""
    store.apply(ops.COMMUNITIES, 1, UpsertPolicy.UPDATE_ONLY, {'name': 'Ghost'})

    assert store.get(ops.COMMUNITIES, 1) is None
    assert store.count(ops.COMMUNITIES) == 0


def test_delete_missing_row_is_noop(store):
    """Test deleting an absent row does not fail."""
    store.apply_all([ops.Delete(ops.DRAFT_REVIEWS, '3-0xdd')])
    assert store.count(ops.DRAFT_REVIEWS) == 0


def test_apply_all_is_atomic(store):
    """Test a failing operation rolls back the whole batch."""
    good = ops.insert_or_update(ops.COMMUNITIES, 1, _community('Kept?'))
    bad = ops.insert_or_update(ops.COMMUNITIES, 2, {**_community('Bad'), 'name': None})

    with pytest.raises(StoreError):
        store.apply_all([good, bad])

    assert store.get(ops.COMMUNITIES, 1) is None


def test_unknown_entity(store):
    """Test writes to unregistered entities raise StoreError."""
    with pytest.raises(StoreError):
        store.apply('nope', 1, UpsertPolicy.INSERT_OR_UPDATE, {})


def test_timestamps_round_trip_as_utc(store):
    """Test stored timestamps come back timezone-aware."""
    store.apply(ops.COMMUNITIES, 1, UpsertPolicy.INSERT_OR_UPDATE, _community('Shift', 1700000000))

    created_at = store.get(ops.COMMUNITIES, 1).created_at
    assert created_at.tzinfo is not None
    assert created_at.astimezone(timezone.utc) == to_datetime(1700000000)


def test_json_null_options(store):
    """Test null options read back as None."""
    fields = {
        'community_id': 1, 'proposer': '0xP', 'targets': [], 'values': [], 'calldatas': [],
        'state': 'Active', 'created_at': to_datetime(1), 'multi_choice_options': None
    }
    store.apply(ops.PROPOSALS, '1', UpsertPolicy.INSERT_OR_UPDATE, fields)

    assert store.get(ops.PROPOSALS, '1').multi_choice_options is None


def test_find_by_foreign_key(store):
    """Test rows are queryable by foreign key."""
    for version in (0, 1):
        store.apply(ops.DRAFT_VERSIONS, f"3-{version}", UpsertPolicy.INSERT_OR_UPDATE, {
            'draft_id': 3, 'version_number': version, 'cid': f"QmV{version}",
            'contributor': '0xCC', 'created_at': to_datetime(version)
        })

    versions = store.find(ops.DRAFT_VERSIONS, draft_id=3, order_by='version_number')
    assert [v.id for v in versions] == ['3-0', '3-1']
    assert store.find(ops.DRAFT_VERSIONS, draft_id=4) == []


def test_export_to_csv(store, tmp_path):
    """Test a derived table exports to CSV."""
    store.apply(ops.COMMUNITIES, 1, UpsertPolicy.INSERT_OR_UPDATE, _community('Shift'))
    utils = DatabaseUtils({'database': {'backup': {'path': str(tmp_path / 'backups')}}}, store)

    output = utils.export_to_csv(ops.COMMUNITIES, tmp_path / 'export')

    df = pd.read_csv(output)
    assert list(df['name']) == ['Shift']


def test_backup_sqlite_file(tmp_path):
    """Test file-based SQLite stores can be backed up."""
    config = {'database': {
        'url': f"sqlite:///{tmp_path / 'indexer.db'}",
        'backup': {'path': str(tmp_path / 'backups')}
    }}
    manager = DatabaseManager(config)
    manager.apply(ops.COMMUNITIES, 1, UpsertPolicy.INSERT_OR_UPDATE, _community('Shift'))

    backup = DatabaseUtils(config, manager).create_backup()
    manager.dispose()

    assert backup.exists()
    assert backup.name.endswith('.db.gz')


def test_backup_rejects_memory_store(store):
    """Test in-memory stores cannot be backed up."""
    with pytest.raises(ValueError):
        DatabaseUtils({'database': {}}, store).create_backup()


def _vote(weight):
    return {
        'proposal_id': '500',
        'voter': '0xaa',
        'weight': weight,
        'option_index': 1,
        'cast_at': to_datetime(100),
    }


def test_uint256_weights_round_trip(store):
    """Test token-scale weights beyond 64 bits are stored exactly."""
    max_uint = 2 ** 256 - 1
    store.apply(ops.PROPOSAL_VOTES, '500-0xaa', UpsertPolicy.INSERT_OR_UPDATE, _vote(100 * 10 ** 18))
    store.apply(ops.PROPOSAL_VOTES, '500-0xbb', UpsertPolicy.INSERT_OR_UPDATE, _vote(max_uint))

    assert store.get(ops.PROPOSAL_VOTES, '500-0xaa').weight == 100 * 10 ** 18
    assert store.get(ops.PROPOSAL_VOTES, '500-0xbb').weight == max_uint
    assert store.get(ops.PROPOSAL_VOTES, '500-0xbb').to_json()['weight'] == max_uint


def test_out_of_range_weight_raises_store_error(store):
    """Test weights outside uint256 fail as a store error."""
    with pytest.raises(StoreError):
        store.apply(ops.PROPOSAL_VOTES, '500-0xaa', UpsertPolicy.INSERT_OR_UPDATE, _vote(2 ** 256))
    assert store.count(ops.PROPOSAL_VOTES) == 0


def test_integer_overflow_raises_store_error(store):
    """Test driver integer overflow is reported as a store error."""
    with pytest.raises(StoreError):
        store.apply(ops.COMMUNITIES, 1, UpsertPolicy.INSERT_OR_UPDATE, {**_community('Big'), 'chain_id': 2 ** 70})
    assert store.count(ops.COMMUNITIES) == 0
