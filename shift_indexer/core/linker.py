"""
Handlers whose effect spans two entity types in one logical step.

Escalation turns a draft into a governor proposal, outcome propagation keeps
the draft and its proposal on the same terminal status, and juror assignment
has two producers with different conflict policies. The operations returned
for one event are applied in a single transaction by the projector.
"""

import logging
from typing import List

from shift_indexer.core import operations as ops
from shift_indexer.core.events import ChainEvent
from shift_indexer.core.handlers import ProjectionContext
from shift_indexer.core.identifiers import juror_assignment_id
from shift_indexer.core.operations import Operation
from shift_indexer.core.statuses import DRAFT_ESCALATED, DRAFT_STATUSES, JurorDecision, ProposalState
from shift_indexer.utils.chain_utils import option_range, to_int

logger = logging.getLogger(__name__)


def on_proposal_escalated(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    """
    Link a draft to the proposal it was escalated into.

    The proposal write converges with direct governor creation on the same
    proposal id: when the row already exists only the options, state and
    creation time are overwritten.
    """
    draft_id = event.int_arg('draftId')
    proposal_id = str(event.int_arg('proposalId'))
    now = event.timestamp
    if event.bool_arg('isMultiChoice', False):
        options = option_range(event.arg('numOptions', 0))
    else:
        options = None

    proposer = event.arg('proposer', None) or event.tx_from
    if not proposer:
        logger.warning(f"ProposalEscalated for proposal {proposal_id} has no proposer or sender; storing ''")
        proposer = ''
    proposal = {
        'community_id': ctx.default_community_id,
        'proposer': proposer,
        'description_cid': None,
        'description_hash': None,
        'targets': [],
        'values': [],
        'calldatas': [],
        'state': ProposalState.ACTIVE.value,
        'created_at': now,
        'queued_at': None,
        'executed_at': None,
        'multi_choice_options': options,
    }
    conflict = {
        'multi_choice_options': options,
        'state': ProposalState.ACTIVE.value,
        'created_at': now,
    }
    return [
        ops.update_only(ops.DRAFTS, draft_id, {
            'escalated_proposal_id': proposal_id,
            'status': DRAFT_ESCALATED,
            'updated_at': now,
        }),
        ops.insert_or_update(ops.PROPOSALS, proposal_id, proposal, conflict),
    ]


def on_proposal_outcome_updated(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    """
    Propagate a resolved outcome to both the draft and its proposal.

    Proposal.state takes the draft-domain value (e.g. WON/LOST) here, next to
    the voting-lifecycle values written by governor events.
    """
    outcome = DRAFT_STATUSES.lookup(event.arg('outcome'))
    return [
        ops.update_only(ops.DRAFTS, event.int_arg('draftId'), {
            'status': outcome,
            'updated_at': event.timestamp,
        }),
        ops.update_only(ops.PROPOSALS, str(event.int_arg('proposalId')), {'state': outcome}),
    ]


def on_jurors_selected(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    """
    Weighted juror selection: a fresh assignment round.

    Every listed juror is written insert-or-update with its weight, and any
    previously recorded decision is cleared.
    """
    claim_id = event.int_arg('engagementId')
    jurors = list(event.arg('jurors', []))
    powers = list(event.arg('powers', []))

    result: List[Operation] = [
        ops.update_only(ops.CLAIMS, claim_id, {'community_id': event.int_arg('communityId')})
    ]
    for index, juror in enumerate(jurors):
        weight = to_int(powers[index], 'powers') if index < len(powers) else None
        fields = {
            'claim_id': claim_id,
            'juror': juror,
            'weight': weight,
            'decision': None,
            'decided_at': None,
        }
        conflict = {'weight': weight, 'decision': None, 'decided_at': None}
        result.append(ops.insert_or_update(
            ops.JUROR_ASSIGNMENTS, juror_assignment_id(claim_id, juror), fields, conflict
        ))
    return result


def on_jurors_assigned(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    """Unweighted assignment: placeholders only, never clobbering a selection."""
    claim_id = event.int_arg('engagementId')
    result: List[Operation] = []
    for juror in event.arg('jurors', []):
        fields = {
            'claim_id': claim_id,
            'juror': juror,
            'weight': None,
            'decision': None,
            'decided_at': None,
        }
        result.append(ops.insert_or_ignore(
            ops.JUROR_ASSIGNMENTS, juror_assignment_id(claim_id, juror), fields
        ))
    return result


def on_engagement_verified(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    key = juror_assignment_id(event.int_arg('engagementId'), event.arg('verifier'))
    decision = JurorDecision.from_approve(event.bool_arg('approve'))
    return [ops.update_only(ops.JUROR_ASSIGNMENTS, key, {
        'decision': decision.value,
        'decided_at': event.timestamp,
    })]
