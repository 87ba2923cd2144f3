"""
Mapping of small on-chain status codes to domain status strings.

Every domain keeps an ordered tuple of statuses indexed by the contract's enum
value. A code outside the tuple resolves to the map's default, which is the
first status of the domain: an unknown code leaves the entity in its initial
state instead of failing the event.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Tuple


@dataclass(frozen=True)
class StatusMap:
    """Ordered status vocabulary for one domain."""
    domain: str
    values: Tuple[str, ...]

    @property
    def default(self) -> str:
        """Fallback status for out-of-range codes."""
        return self.values[0]

    @property
    def initial(self) -> str:
        """Status assigned when an entity is created."""
        return self.values[0]

    def lookup(self, code: Any) -> str:
        """
        Resolve an on-chain code to its status string.

        Args:
            code: Enum value as decoded from the event

        Returns:
            Status at ``code``, or the default when the code is out of range
            or not an integer
        """
        try:
            index = int(code)
        except (TypeError, ValueError):
            return self.default
        if isinstance(code, float) and not code.is_integer():
            return self.default
        if 0 <= index < len(self.values):
            return self.values[index]
        return self.default

    def __contains__(self, status: str) -> bool:
        return status in self.values


REQUEST_STATUSES = StatusMap('request', ('OPEN_DEBATE', 'FROZEN', 'ARCHIVED'))

DRAFT_STATUSES = StatusMap(
    'draft',
    ('DRAFTING', 'REVIEW', 'FINALIZED', 'ESCALATED', 'WON', 'LOST')
)

REVIEW_STANCES = StatusMap(
    'review',
    ('SUPPORT', 'OPPOSE', 'NEUTRAL', 'REQUEST_CHANGES')
)

CLAIM_STATUSES = StatusMap(
    'claim',
    ('PENDING', 'APPROVED', 'REJECTED', 'REVOKED')
)

DRAFT_ESCALATED = DRAFT_STATUSES.values[3]
CLAIM_REVOKED = CLAIM_STATUSES.values[3]


class ProposalState(Enum):
    """Voting-lifecycle states of a governor proposal."""
    ACTIVE = "Active"
    QUEUED = "Queued"
    EXECUTED = "Executed"
    CANCELED = "Canceled"


class JurorDecision(Enum):
    """Decision recorded on a juror assignment."""
    APPROVE = "APPROVE"
    REJECT = "REJECT"

    @classmethod
    def from_approve(cls, approve: Any) -> 'JurorDecision':
        return cls.APPROVE if bool(approve) else cls.REJECT
