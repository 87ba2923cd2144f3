"""
Deterministic composite keys for child records without a natural on-chain id.
"""

from typing import Any

from shift_indexer.utils.chain_utils import normalize_address


def _render(value: Any) -> str:
    # Numeric ids render in base 10 whether they arrive as int or digit string
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, int):
        return str(value)
    text = str(value).strip()
    if text.isdigit():
        return str(int(text))
    return text


def draft_version_id(draft_id: Any, version_number: Any) -> str:
    """Id of a draft version snapshot: ``{draftId}-{versionNumber}``."""
    return f"{_render(draft_id)}-{_render(version_number)}"


def review_id(draft_id: Any, reviewer: Any) -> str:
    """Id of a reviewer's live review on a draft."""
    return f"{_render(draft_id)}-{normalize_address(reviewer)}"


def vote_id(proposal_id: Any, voter: Any) -> str:
    """Id of a voter's live vote on a proposal."""
    return f"{_render(proposal_id)}-{normalize_address(voter)}"


def juror_assignment_id(claim_id: Any, juror: Any) -> str:
    """Id of a juror's assignment to a claim."""
    return f"{_render(claim_id)}-{normalize_address(juror)}"
