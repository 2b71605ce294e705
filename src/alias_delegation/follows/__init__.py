"""Follow relations between users and spaces."""
from __future__ import annotations

from alias_delegation.follows.registry import FollowRegistry, FollowRelation

__all__ = ["FollowRegistry", "FollowRelation"]
