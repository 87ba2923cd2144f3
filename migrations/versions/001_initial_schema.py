"""Derived read-model tables

Revision ID: 001
Revises: 
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from shift_indexer.database.models import Uint256

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Communities and requests
    op.create_table(
        'communities',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('chain_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('metadata_uri', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False)
    )

    op.create_table(
        'requests',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('community_id', sa.Integer(), nullable=False),
        sa.Column('author', sa.String(42), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('cid', sa.Text(), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False)
    )
    op.create_index('ix_requests_community_id', 'requests', ['community_id'])

    op.create_table(
        'comments',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('request_id', sa.Integer(), nullable=False),
        sa.Column('author', sa.String(42), nullable=False),
        sa.Column('cid', sa.Text(), nullable=False),
        sa.Column('parent_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_moderated', sa.Boolean(), nullable=False)
    )
    op.create_index('ix_comments_request_id', 'comments', ['request_id'])

    # Drafts
    op.create_table(
        'drafts',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('community_id', sa.Integer(), nullable=False),
        sa.Column('request_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('latest_version_cid', sa.Text(), nullable=True),
        sa.Column('escalated_proposal_id', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False)
    )
    op.create_index('ix_drafts_community_id', 'drafts', ['community_id'])
    op.create_index('ix_drafts_request_id', 'drafts', ['request_id'])

    op.create_table(
        'draft_versions',
        sa.Column('id', sa.String(100), primary_key=True),
        sa.Column('draft_id', sa.Integer(), nullable=False),
        sa.Column('version_number', sa.Integer(), nullable=False),
        sa.Column('cid', sa.Text(), nullable=False),
        sa.Column('contributor', sa.String(42), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False)
    )
    op.create_index('ix_draft_versions_draft_id', 'draft_versions', ['draft_id'])

    op.create_table(
        'draft_reviews',
        sa.Column('id', sa.String(100), primary_key=True),
        sa.Column('draft_id', sa.Integer(), nullable=False),
        sa.Column('reviewer', sa.String(42), nullable=False),
        sa.Column('stance', sa.String(20), nullable=False),
        sa.Column('comment_cid', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False)
    )
    op.create_index('ix_draft_reviews_draft_id', 'draft_reviews', ['draft_id'])

    # Governance
    op.create_table(
        'proposals',
        sa.Column('id', sa.String(100), primary_key=True),
        sa.Column('community_id', sa.Integer(), nullable=False),
        sa.Column('proposer', sa.String(42), nullable=False),
        sa.Column('description_cid', sa.Text(), nullable=True),
        sa.Column('description_hash', sa.String(66), nullable=True),
        sa.Column('targets', sa.JSON(), nullable=False),
        sa.Column('values', sa.JSON(), nullable=False),
        sa.Column('calldatas', sa.JSON(), nullable=False),
        sa.Column('state', sa.String(20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('queued_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('executed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('multi_choice_options', sa.JSON(), nullable=True)
    )
    op.create_index('ix_proposals_community_id', 'proposals', ['community_id'])

    op.create_table(
        'proposal_votes',
        sa.Column('id', sa.String(150), primary_key=True),
        sa.Column('proposal_id', sa.String(100), nullable=False),
        sa.Column('voter', sa.String(42), nullable=False),
        sa.Column('weight', Uint256(), nullable=False),
        sa.Column('option_index', sa.Integer(), nullable=True),
        sa.Column('cast_at', sa.DateTime(timezone=True), nullable=False)
    )
    op.create_index('ix_proposal_votes_proposal_id', 'proposal_votes', ['proposal_id'])

    # Engagements
    op.create_table(
        'claims',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('community_id', sa.Integer(), nullable=False),
        sa.Column('valuable_action_id', sa.Integer(), nullable=False),
        sa.Column('claimant', sa.String(42), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('evidence_manifest_cid', sa.Text(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True)
    )
    op.create_index('ix_claims_community_id', 'claims', ['community_id'])

    op.create_table(
        'juror_assignments',
        sa.Column('id', sa.String(100), primary_key=True),
        sa.Column('claim_id', sa.Integer(), nullable=False),
        sa.Column('juror', sa.String(42), nullable=False),
        sa.Column('weight', Uint256(), nullable=True),
        sa.Column('decision', sa.String(10), nullable=True),
        sa.Column('decided_at', sa.DateTime(timezone=True), nullable=True)
    )
    op.create_index('ix_juror_assignments_claim_id', 'juror_assignments', ['claim_id'])


def downgrade() -> None:
    for table in (
        'juror_assignments',
        'claims',
        'proposal_votes',
        'proposals',
        'draft_reviews',
        'draft_versions',
        'drafts',
        'comments',
        'requests',
        'communities',
    ):
        op.drop_table(table)
