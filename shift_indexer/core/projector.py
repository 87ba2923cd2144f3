"""
Event dispatch: routes each event to its projection handler and applies the
resulting operations to the derived store atomically.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from tqdm import tqdm

from shift_indexer.core import handlers, linker
from shift_indexer.core.events import ChainEvent
from shift_indexer.core.handlers import ProjectionContext
from shift_indexer.core.operations import Operation

Handler = Callable[[ChainEvent, ProjectionContext], List[Operation]]

EVENT_HANDLERS: Dict[str, Handler] = {
    # CommunityRegistry
    'CommunityRegistered': handlers.on_community_registered,
    # RequestHub
    'RequestCreated': handlers.on_request_created,
    'CommentPosted': handlers.on_comment_posted,
    'RequestStatusChanged': handlers.on_request_status_changed,
    'CommentModerated': handlers.on_comment_moderated,
    # DraftsManager
    'DraftCreated': handlers.on_draft_created,
    'VersionSnapshot': handlers.on_version_snapshot,
    'ReviewSubmitted': handlers.on_review_submitted,
    'ReviewRetracted': handlers.on_review_retracted,
    'DraftStatusChanged': handlers.on_draft_status_changed,
    'ProposalEscalated': linker.on_proposal_escalated,
    'ProposalOutcomeUpdated': linker.on_proposal_outcome_updated,
    # Governor and multi-choice counting
    'ProposalCreated': handlers.on_proposal_created,
    'MultiChoiceProposalCreated': handlers.on_multi_choice_proposal_created,
    'MultiChoiceEnabled': handlers.on_multi_choice_enabled,
    'ProposalQueued': handlers.on_proposal_queued,
    'ProposalExecuted': handlers.on_proposal_executed,
    'ProposalCanceled': handlers.on_proposal_canceled,
    'VoteCast': handlers.on_vote_cast,
    'MultiChoiceVoteCast': handlers.on_multi_choice_vote_cast,
    'VoteCastMulti': handlers.on_multi_choice_vote_cast,
    # Engagements and verifier manager
    'EngagementSubmitted': handlers.on_engagement_submitted,
    'JurorsSelected': linker.on_jurors_selected,
    'JurorsAssigned': linker.on_jurors_assigned,
    'EngagementVerified': linker.on_engagement_verified,
    'EngagementResolved': handlers.on_engagement_resolved,
    'EngagementRevoked': handlers.on_engagement_revoked,
}


@dataclass
class ReplayStats:
    """Counters for a replay run."""
    processed: int = 0
    ignored: int = 0
    operations: int = 0
    by_event: Dict[str, int] = field(default_factory=dict)
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    @property
    def duration(self) -> float:
        end = self.finished_at or datetime.now()
        return (end - self.started_at).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'processed': self.processed,
            'ignored': self.ignored,
            'operations': self.operations,
            'by_event': dict(self.by_event),
            'duration': self.duration
        }


class Projector:
    """Projects chain events onto the derived store."""

    def __init__(
        self,
        store: Any,
        context: Optional[ProjectionContext] = None,
        event_handlers: Optional[Dict[str, Handler]] = None
    ):
        """
        Initialize the projector.

        Args:
            store: Derived store exposing ``apply_all(operations)``
            context: Deployment facts (chain id, default community id)
            event_handlers: Handler registry; defaults to ``EVENT_HANDLERS``
        """
        self.store = store
        self.context = context or ProjectionContext()
        self.handlers = dict(event_handlers if event_handlers is not None else EVENT_HANDLERS)
        self.logger = logging.getLogger(self.__class__.__name__)

    def handles(self, event_name: str) -> bool:
        return event_name in self.handlers

    def project(self, event: Union[ChainEvent, Dict[str, Any]]) -> List[Operation]:
        """
        Compute the operations for one event without applying them.

        Unknown event names yield no operations.
        """
        if not isinstance(event, ChainEvent):
            event = ChainEvent.from_dict(event)

        handler = self.handlers.get(event.name)
        if handler is None:
            self.logger.debug(f"Ignoring unhandled event {event.name}")
            return []
        return handler(event, self.context)

    def process(self, event: Union[ChainEvent, Dict[str, Any]]) -> int:
        """
        Project one event and apply its operations in a single transaction.

        Args:
            event: Decoded event or raw event dict

        Returns:
            Number of operations applied

        Raises:
            EventDecodeError: If the event cannot be decoded
            StoreError: If the store write fails; the event can be retried
        """
        operations = self.project(event)
        if operations:
            self.store.apply_all(operations)
        return len(operations)

    def replay(
        self,
        events: Iterable[Union[ChainEvent, Dict[str, Any]]],
        show_progress: bool = False,
        total: Optional[int] = None
    ) -> ReplayStats:
        """
        Process a sequence of events in delivery order.

        Stops at the first failure, leaving every earlier event applied.

        Args:
            events: Events to replay
            show_progress: Whether to display a tqdm progress bar
            total: Expected number of events, for the progress bar

        Returns:
            ReplayStats for the run
        """
        stats = ReplayStats()
        iterator = tqdm(events, total=total, unit='event', disable=not show_progress)

        for event in iterator:
            if not isinstance(event, ChainEvent):
                event = ChainEvent.from_dict(event)

            if not self.handles(event.name):
                stats.ignored += 1
                self.logger.debug(f"Ignoring unhandled event {event.name}")
                continue

            stats.operations += self.process(event)
            stats.processed += 1
            stats.by_event[event.name] = stats.by_event.get(event.name, 0) + 1

        stats.finished_at = datetime.now()
        self.logger.info(
            f"Replayed {stats.processed} events ({stats.ignored} ignored, "
            f"{stats.operations} operations) in {stats.duration:.2f}s"
        )
        return stats
