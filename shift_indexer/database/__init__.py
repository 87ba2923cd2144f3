"""
Derived store: table models, policy-driven writes and maintenance utilities.
"""

from .models import (
    Base,
    ENTITY_MODELS,
    Community,
    Request,
    Comment,
    Draft,
    DraftVersion,
    DraftReview,
    Proposal,
    ProposalVote,
    Claim,
    JurorAssignment
)
from .database import DatabaseManager
from .db_utils import DatabaseUtils

__all__ = [
    'Base',
    'ENTITY_MODELS',
    'Community',
    'Request',
    'Comment',
    'Draft',
    'DraftVersion',
    'DraftReview',
    'Proposal',
    'ProposalVote',
    'Claim',
    'JurorAssignment',
    'DatabaseManager',
    'DatabaseUtils'
]
