"""
Write operations produced by projection handlers.

Handlers never touch the store directly. They return a small list of
operations, each naming the entity, the row id and the conflict policy, and the
store applies the whole list in one transaction.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union

# Derived entity names, matching the store's table names
COMMUNITIES = 'communities'
REQUESTS = 'requests'
COMMENTS = 'comments'
DRAFTS = 'drafts'
DRAFT_VERSIONS = 'draft_versions'
DRAFT_REVIEWS = 'draft_reviews'
PROPOSALS = 'proposals'
PROPOSAL_VOTES = 'proposal_votes'
CLAIMS = 'claims'
JUROR_ASSIGNMENTS = 'juror_assignments'


class UpsertPolicy(Enum):
    """Conflict-resolution rule for a write keyed by id."""
    INSERT_OR_UPDATE = "insert_or_update"  # Overwrite conflict fields if the row exists
    INSERT_OR_IGNORE = "insert_or_ignore"  # First write wins
    UPDATE_ONLY = "update_only"  # No-op if the row does not exist


@dataclass(frozen=True)
class Write:
    """Insert and/or update of one row."""
    entity: str
    key: Any
    policy: UpsertPolicy
    fields: Dict[str, Any] = field(default_factory=dict)
    # Fields overwritten on conflict; None means every field in ``fields``
    conflict_fields: Optional[Dict[str, Any]] = None

    def on_conflict(self) -> Dict[str, Any]:
        """Values to set when an insert-or-update hits an existing row."""
        if self.conflict_fields is not None:
            return dict(self.conflict_fields)
        return {k: v for k, v in self.fields.items() if k != 'id'}


@dataclass(frozen=True)
class Delete:
    """Removal of one row; a no-op when the row does not exist."""
    entity: str
    key: Any

    @property
    def policy(self) -> UpsertPolicy:
        return UpsertPolicy.UPDATE_ONLY


Operation = Union[Write, Delete]


def insert_or_update(
    entity: str,
    key: Any,
    fields: Dict[str, Any],
    conflict_fields: Optional[Dict[str, Any]] = None
) -> Write:
    return Write(entity, key, UpsertPolicy.INSERT_OR_UPDATE, fields, conflict_fields)


def insert_or_ignore(entity: str, key: Any, fields: Dict[str, Any]) -> Write:
    return Write(entity, key, UpsertPolicy.INSERT_OR_IGNORE, fields)


def update_only(entity: str, key: Any, fields: Dict[str, Any]) -> Write:
    return Write(entity, key, UpsertPolicy.UPDATE_ONLY, fields)
