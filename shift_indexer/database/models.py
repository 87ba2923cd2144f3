"""
SQLAlchemy table models for the derived read model.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Type

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import TypeDecorator

Base = declarative_base()


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC timestamp on every backend.

    SQLite has no timezone support, so values are stored as naive UTC there and
    re-tagged with UTC on the way out.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        if dialect.name == 'sqlite':
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Uint256(TypeDecorator):
    """
    Unsigned 256-bit integer such as a token weight.

    PostgreSQL stores NUMERIC(78, 0). SQLite integers are 64-bit and its
    NUMERIC affinity degrades large values to REAL, so there the value is kept
    as a decimal string. Reads always return a Python int.
    """
    impl = Numeric(78, 0)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'sqlite':
            return dialect.type_descriptor(String(78))
        return dialect.type_descriptor(Numeric(78, 0))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = int(value)
        if not 0 <= value < 2 ** 256:
            raise ValueError(f"Value out of uint256 range: {value}")
        if dialect.name == 'sqlite':
            return str(value)
        return Decimal(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)


class SerializableMixin:
    """JSON-friendly serialization of a row."""

    def to_json(self) -> Dict[str, Any]:
        """Serialize columns; timestamps become epoch seconds."""
        data = {}
        for column in self.__table__.columns:
            value = getattr(self, column.key)
            if isinstance(value, datetime):
                value = int(value.timestamp())
            data[column.key] = value
        return data

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} id={getattr(self, 'id', None)!r}>"


class Community(SerializableMixin, Base):
    __tablename__ = 'communities'

    id = Column(Integer, primary_key=True, autoincrement=False)
    chain_id = Column(Integer, nullable=False)
    name = Column(Text, nullable=False)
    metadata_uri = Column(Text, nullable=True)
    created_at = Column(UTCDateTime, nullable=False)


class Request(SerializableMixin, Base):
    __tablename__ = 'requests'

    id = Column(Integer, primary_key=True, autoincrement=False)
    community_id = Column(Integer, nullable=False, index=True)
    author = Column(String(42), nullable=False)
    status = Column(String(20), nullable=False)
    cid = Column(Text, nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    created_at = Column(UTCDateTime, nullable=False)


class Comment(SerializableMixin, Base):
    __tablename__ = 'comments'

    id = Column(Integer, primary_key=True, autoincrement=False)
    request_id = Column(Integer, nullable=False, index=True)
    author = Column(String(42), nullable=False)
    cid = Column(Text, nullable=False)
    parent_id = Column(Integer, nullable=True)  # None for root comments
    created_at = Column(UTCDateTime, nullable=False)
    is_moderated = Column(Boolean, nullable=False, default=False)


class Draft(SerializableMixin, Base):
    __tablename__ = 'drafts'

    id = Column(Integer, primary_key=True, autoincrement=False)
    community_id = Column(Integer, nullable=False, index=True)
    request_id = Column(Integer, nullable=False, index=True)
    status = Column(String(20), nullable=False)
    latest_version_cid = Column(Text, nullable=True)
    escalated_proposal_id = Column(String(100), nullable=True)
    created_at = Column(UTCDateTime, nullable=False)
    updated_at = Column(UTCDateTime, nullable=False)


class DraftVersion(SerializableMixin, Base):
    __tablename__ = 'draft_versions'

    id = Column(String(100), primary_key=True)  # "{draft_id}-{version_number}"
    draft_id = Column(Integer, nullable=False, index=True)
    version_number = Column(Integer, nullable=False)
    cid = Column(Text, nullable=False)
    contributor = Column(String(42), nullable=False)
    created_at = Column(UTCDateTime, nullable=False)


class DraftReview(SerializableMixin, Base):
    __tablename__ = 'draft_reviews'

    id = Column(String(100), primary_key=True)  # "{draft_id}-{reviewer}"
    draft_id = Column(Integer, nullable=False, index=True)
    reviewer = Column(String(42), nullable=False)
    stance = Column(String(20), nullable=False)
    comment_cid = Column(Text, nullable=True)
    created_at = Column(UTCDateTime, nullable=False)


class Proposal(SerializableMixin, Base):
    __tablename__ = 'proposals'

    id = Column(String(100), primary_key=True)
    community_id = Column(Integer, nullable=False, index=True)
    proposer = Column(String(42), nullable=False)
    description_cid = Column(Text, nullable=True)
    description_hash = Column(String(66), nullable=True)
    targets = Column(JSON, nullable=False, default=list)
    values = Column(JSON, nullable=False, default=list)
    calldatas = Column(JSON, nullable=False, default=list)
    # Voting-lifecycle states and draft outcomes (WON/LOST) share this field
    state = Column(String(20), nullable=False)
    created_at = Column(UTCDateTime, nullable=False)
    queued_at = Column(UTCDateTime, nullable=True)
    executed_at = Column(UTCDateTime, nullable=True)
    multi_choice_options = Column(JSON(none_as_null=True), nullable=True)


class ProposalVote(SerializableMixin, Base):
    __tablename__ = 'proposal_votes'

    id = Column(String(150), primary_key=True)  # "{proposal_id}-{voter}"
    proposal_id = Column(String(100), nullable=False, index=True)
    voter = Column(String(42), nullable=False)
    weight = Column(Uint256, nullable=False)
    option_index = Column(Integer, nullable=True)
    cast_at = Column(UTCDateTime, nullable=False)


class Claim(SerializableMixin, Base):
    __tablename__ = 'claims'

    id = Column(Integer, primary_key=True, autoincrement=False)
    community_id = Column(Integer, nullable=False, index=True)
    valuable_action_id = Column(Integer, nullable=False)
    claimant = Column(String(42), nullable=False)
    status = Column(String(20), nullable=False)
    evidence_manifest_cid = Column(Text, nullable=True)
    submitted_at = Column(UTCDateTime, nullable=False)
    resolved_at = Column(UTCDateTime, nullable=True)


class JurorAssignment(SerializableMixin, Base):
    __tablename__ = 'juror_assignments'

    id = Column(String(100), primary_key=True)  # "{claim_id}-{juror}"
    claim_id = Column(Integer, nullable=False, index=True)
    juror = Column(String(42), nullable=False)
    weight = Column(Uint256, nullable=True)
    decision = Column(String(10), nullable=True)
    decided_at = Column(UTCDateTime, nullable=True)


ENTITY_MODELS: Dict[str, Type[Base]] = {
    model.__tablename__: model
    for model in (
        Community,
        Request,
        Comment,
        Draft,
        DraftVersion,
        DraftReview,
        Proposal,
        ProposalVote,
        Claim,
        JurorAssignment,
    )
}
