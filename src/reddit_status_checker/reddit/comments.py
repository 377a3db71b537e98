"""
Purpose: Decode Reddit comment listings and count collapsed comments.
Constraints: Pure helpers only; no side effects.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Union

COMMENT_KIND = "t1"
MORE_KIND = "more"

# Reddit auto-collapses comments scored below this
COLLAPSE_SCORE_THRESHOLD = -4


@dataclass
class CommentNode:
    collapsed: bool = False
    collapsed_reason: Optional[str] = None
    score: Optional[float] = None
    replies: List["Node"] = field(default_factory=list)

    @property
    def is_collapsed(self) -> bool:
        if self.collapsed or self.collapsed_reason:
            return True
        return self.score is not None and self.score < COLLAPSE_SCORE_THRESHOLD


@dataclass
class MoreNode:
    """Placeholder for siblings Reddit did not include in the payload."""

    count: int = 0


Node = Union[CommentNode, MoreNode]


def finite_number(value: Any) -> Optional[float]:
    """The value if it is a finite JSON number, else None (bools, NaN and Infinity included)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return value


def listing_children(listing: Any) -> List[Any]:
    """Children of a Listing object; anything malformed reads as empty."""
    if not isinstance(listing, Mapping):
        return []
    data = listing.get("data")
    if not isinstance(data, Mapping):
        return []
    children = data.get("children")
    return children if isinstance(children, list) else []


def parse_nodes(children: Any) -> List[Node]:
    """Decode a `children` array; unknown kinds are dropped."""
    if not isinstance(children, list):
        return []
    nodes: List[Node] = []
    for item in children:
        if not isinstance(item, Mapping):
            continue
        data = item.get("data")
        if not isinstance(data, Mapping):
            data = {}
        kind = item.get("kind")
        if kind == COMMENT_KIND:
            reason = data.get("collapsed_reason")
            nodes.append(
                CommentNode(
                    collapsed=data.get("collapsed") is True,
                    collapsed_reason=str(reason) if reason else None,
                    score=finite_number(data.get("score")),
                    # replies is "" when a comment has none
                    replies=parse_nodes(listing_children(data.get("replies"))),
                )
            )
        elif kind == MORE_KIND:
            count = finite_number(data.get("count"))
            nodes.append(MoreNode(count=int(count) if count and count > 0 else 0))
    return nodes


def count_collapsed(nodes: List[Node]) -> int:
    """Collapsed comments plus unfetched "more" siblings, depth-first pre-order."""
    total = 0
    stack = list(reversed(nodes))
    while stack:
        node = stack.pop()
        if isinstance(node, MoreNode):
            total += node.count
            continue
        if node.is_collapsed:
            total += 1
        stack.extend(reversed(node.replies))
    return total
