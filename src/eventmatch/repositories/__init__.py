"""Repositories wrapping database access for the engine's own tables."""

from .match_repo import LikeOutcome, MatchRegistry, canonical_pair, pair_lock_statement
from .message_repo import MessageRepository
from .swipe_repo import SwipeLedger

__all__ = [
    "LikeOutcome",
    "MatchRegistry",
    "MessageRepository",
    "SwipeLedger",
    "canonical_pair",
    "pair_lock_statement",
]
