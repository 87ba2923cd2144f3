"""
Event projection core: id derivation, status mapping, handlers and dispatch.
"""

from .identifiers import (
    draft_version_id,
    review_id,
    vote_id,
    juror_assignment_id
)

from .statuses import (
    StatusMap,
    REQUEST_STATUSES,
    DRAFT_STATUSES,
    REVIEW_STANCES,
    CLAIM_STATUSES,
    ProposalState,
    JurorDecision
)

from .operations import (
    UpsertPolicy,
    Write,
    Delete,
    Operation
)

from .events import ChainEvent, load_events
from .handlers import ProjectionContext
from .projector import Projector, ReplayStats, EVENT_HANDLERS

__all__ = [
    'draft_version_id',
    'review_id',
    'vote_id',
    'juror_assignment_id',
    'StatusMap',
    'REQUEST_STATUSES',
    'DRAFT_STATUSES',
    'REVIEW_STANCES',
    'CLAIM_STATUSES',
    'ProposalState',
    'JurorDecision',
    'UpsertPolicy',
    'Write',
    'Delete',
    'Operation',
    'ChainEvent',
    'load_events',
    'ProjectionContext',
    'Projector',
    'ReplayStats',
    'EVENT_HANDLERS'
]
