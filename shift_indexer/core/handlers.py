"""
Projection handlers for single-entity events.

Each handler is a pure function ``(event, context) -> [operations]``. It derives
ids, maps status codes and picks the conflict policy; applying the operations
is left to the store. Handlers never read the store and never raise for a
missing parent row: update-only writes against absent rows are no-ops.
"""

from dataclasses import dataclass
from typing import List

from shift_indexer.core import operations as ops
from shift_indexer.core.events import ChainEvent
from shift_indexer.core.identifiers import draft_version_id, review_id, vote_id
from shift_indexer.core.operations import Operation
from shift_indexer.core.statuses import (
    CLAIM_REVOKED,
    CLAIM_STATUSES,
    DRAFT_STATUSES,
    REQUEST_STATUSES,
    REVIEW_STANCES,
    ProposalState,
)
from shift_indexer.utils.chain_utils import (
    description_hash,
    option_range,
    stringify_values,
    to_hex,
    to_int,
)


@dataclass(frozen=True)
class ProjectionContext:
    """Deployment facts that events do not carry themselves."""
    chain_id: int = 0
    default_community_id: int = 0


# --- Community ----------------------------------------------------------------

def on_community_registered(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    chain_id = event.arg('chainId', None)
    if chain_id is None:
        chain_id = event.chain_id if event.chain_id is not None else ctx.chain_id
    fields = {
        'chain_id': int(chain_id),
        'name': event.arg('name'),
        'metadata_uri': event.arg('metadataUri', None),
        'created_at': event.timestamp,
    }
    return [ops.insert_or_update(ops.COMMUNITIES, event.int_arg('communityId'), fields)]


# --- Requests and comments ----------------------------------------------------

def on_request_created(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    fields = {
        'community_id': event.int_arg('communityId'),
        'author': event.arg('author'),
        'status': REQUEST_STATUSES.initial,
        'cid': event.arg('cid'),
        'tags': list(event.arg('tags', [])),
        'created_at': event.timestamp,
    }
    return [ops.insert_or_ignore(ops.REQUESTS, event.int_arg('requestId'), fields)]


def on_comment_posted(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    # Parent id 0 marks a root comment
    parent_id = to_int(event.arg('parentCommentId', 0), 'parentCommentId')
    fields = {
        'request_id': event.int_arg('requestId'),
        'author': event.arg('author'),
        'cid': event.arg('cid'),
        'parent_id': parent_id or None,
        'created_at': event.timestamp,
        'is_moderated': False,
    }
    return [ops.insert_or_ignore(ops.COMMENTS, event.int_arg('commentId'), fields)]


def on_request_status_changed(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    status = REQUEST_STATUSES.lookup(event.arg('newStatus'))
    return [ops.update_only(ops.REQUESTS, event.int_arg('requestId'), {'status': status})]


def on_comment_moderated(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    hidden = event.bool_arg('hidden')
    return [ops.update_only(ops.COMMENTS, event.int_arg('commentId'), {'is_moderated': hidden})]


# --- Drafts -------------------------------------------------------------------

def on_draft_created(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    """Create the draft together with its implicit version 0."""
    draft_id = event.int_arg('draftId')
    version_cid = event.arg('versionCID')
    now = event.timestamp
    fields = {
        'community_id': event.int_arg('communityId'),
        'request_id': event.int_arg('requestId'),
        'status': DRAFT_STATUSES.initial,
        'latest_version_cid': version_cid,
        'escalated_proposal_id': None,
        'created_at': now,
        'updated_at': now,
    }
    # A replayed creation keeps the original created_at and any escalation link
    conflict = {
        'community_id': fields['community_id'],
        'request_id': fields['request_id'],
        'status': fields['status'],
        'latest_version_cid': version_cid,
        'updated_at': now,
    }
    version = {
        'draft_id': draft_id,
        'version_number': 0,
        'cid': version_cid,
        'contributor': event.arg('author'),
        'created_at': now,
    }
    return [
        ops.insert_or_update(ops.DRAFTS, draft_id, fields, conflict),
        ops.insert_or_ignore(ops.DRAFT_VERSIONS, draft_version_id(draft_id, 0), version),
    ]


def on_version_snapshot(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    draft_id = event.int_arg('draftId')
    version_number = event.int_arg('versionNumber')
    version_cid = event.arg('versionCID')
    fields = {
        'draft_id': draft_id,
        'version_number': version_number,
        'cid': version_cid,
        'contributor': event.arg('contributor'),
        'created_at': event.timestamp,
    }
    conflict = {
        'cid': version_cid,
        'contributor': fields['contributor'],
        'created_at': event.timestamp,
    }
    return [
        ops.insert_or_update(
            ops.DRAFT_VERSIONS, draft_version_id(draft_id, version_number), fields, conflict
        ),
        ops.update_only(ops.DRAFTS, draft_id, {
            'latest_version_cid': version_cid,
            'updated_at': event.timestamp,
        }),
    ]


def on_review_submitted(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    draft_id = event.int_arg('draftId')
    reviewer = event.arg('reviewer')
    stance = REVIEW_STANCES.lookup(event.arg('reviewType'))
    fields = {
        'draft_id': draft_id,
        'reviewer': reviewer,
        'stance': stance,
        'comment_cid': event.arg('reasonCID', None) or None,
        'created_at': event.timestamp,
    }
    conflict = {
        'stance': stance,
        'comment_cid': fields['comment_cid'],
        'created_at': event.timestamp,
    }
    return [ops.insert_or_update(ops.DRAFT_REVIEWS, review_id(draft_id, reviewer), fields, conflict)]


def on_review_retracted(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    key = review_id(event.int_arg('draftId'), event.arg('reviewer'))
    return [ops.Delete(ops.DRAFT_REVIEWS, key)]


def on_draft_status_changed(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    status = DRAFT_STATUSES.lookup(event.arg('newStatus'))
    return [ops.update_only(ops.DRAFTS, event.int_arg('draftId'), {
        'status': status,
        'updated_at': event.timestamp,
    })]


# --- Governor proposals -------------------------------------------------------

def _proposal_key(event: ChainEvent) -> str:
    return str(event.int_arg('proposalId'))


def _created_proposal_fields(event: ChainEvent, ctx: ProjectionContext) -> dict:
    description = event.arg('description', None)
    return {
        'community_id': ctx.default_community_id,
        'proposer': event.arg('proposer'),
        'description_cid': description,
        'description_hash': description_hash(description),
        'targets': [str(t) for t in event.arg('targets', [])],
        'values': stringify_values(event.arg('values', [])),
        'calldatas': [to_hex(c) for c in event.arg('calldatas', [])],
        'state': ProposalState.ACTIVE.value,
        'created_at': event.timestamp,
        'queued_at': None,
        'executed_at': None,
    }


def on_proposal_created(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    """
    Direct governor creation of a binary proposal.

    The conflict set leaves multi_choice_options alone so a proposal first
    seen through draft escalation keeps its options.
    """
    fields = _created_proposal_fields(event, ctx)
    conflict = {k: fields[k] for k in (
        'proposer', 'description_cid', 'description_hash',
        'targets', 'values', 'calldatas', 'state', 'created_at'
    )}
    fields['multi_choice_options'] = None
    return [ops.insert_or_update(ops.PROPOSALS, _proposal_key(event), fields, conflict)]


def on_multi_choice_proposal_created(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    fields = _created_proposal_fields(event, ctx)
    fields['multi_choice_options'] = option_range(event.arg('numOptions'))
    conflict = {k: fields[k] for k in (
        'proposer', 'description_cid', 'description_hash',
        'targets', 'values', 'calldatas', 'state', 'multi_choice_options'
    )}
    return [ops.insert_or_update(ops.PROPOSALS, _proposal_key(event), fields, conflict)]


def on_multi_choice_enabled(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    options = option_range(event.arg('options'))
    return [ops.update_only(ops.PROPOSALS, _proposal_key(event), {'multi_choice_options': options})]


def on_proposal_queued(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    return [ops.update_only(ops.PROPOSALS, _proposal_key(event), {
        'state': ProposalState.QUEUED.value,
        'queued_at': event.timestamp,
    })]


def on_proposal_executed(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    return [ops.update_only(ops.PROPOSALS, _proposal_key(event), {
        'state': ProposalState.EXECUTED.value,
        'executed_at': event.timestamp,
    })]


def on_proposal_canceled(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    return [ops.update_only(ops.PROPOSALS, _proposal_key(event), {
        'state': ProposalState.CANCELED.value,
    })]


def _vote(event: ChainEvent, weight: int, option_index) -> List[Operation]:
    proposal_id = _proposal_key(event)
    voter = event.arg('voter')
    fields = {
        'proposal_id': proposal_id,
        'voter': voter,
        'weight': weight,
        'option_index': option_index,
        'cast_at': event.timestamp,
    }
    conflict = {
        'weight': weight,
        'option_index': option_index,
        'cast_at': event.timestamp,
    }
    return [ops.insert_or_update(ops.PROPOSAL_VOTES, vote_id(proposal_id, voter), fields, conflict)]


def on_vote_cast(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    return _vote(event, event.int_arg('weight'), event.int_arg('support'))


def on_multi_choice_vote_cast(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    return _vote(event, event.int_arg('totalWeight'), None)


# --- Engagements (claims) -----------------------------------------------------

def on_engagement_submitted(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    """A (re)submission overwrites every field and clears resolved_at."""
    fields = {
        'community_id': ctx.default_community_id,
        'valuable_action_id': event.int_arg('typeId'),
        'claimant': event.arg('participant'),
        'status': CLAIM_STATUSES.initial,
        'evidence_manifest_cid': event.arg('evidenceCID', None),
        'submitted_at': event.timestamp,
        'resolved_at': None,
    }
    return [ops.insert_or_update(ops.CLAIMS, event.int_arg('engagementId'), fields)]


def on_engagement_resolved(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    return [ops.update_only(ops.CLAIMS, event.int_arg('engagementId'), {
        'status': CLAIM_STATUSES.lookup(event.arg('status')),
        'resolved_at': event.timestamp,
    })]


def on_engagement_revoked(event: ChainEvent, ctx: ProjectionContext) -> List[Operation]:
    return [ops.update_only(ops.CLAIMS, event.int_arg('engagementId'), {
        'status': CLAIM_REVOKED,
        'resolved_at': event.timestamp,
    })]
