"""Cursor-paginated connection types wrapping a list query's result type."""

import base64
import binascii
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from graphql import (
    GraphQLArgument,
    GraphQLBoolean,
    GraphQLField,
    GraphQLInt,
    GraphQLList,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLOutputType,
    GraphQLString,
)

from recordql.records.record import RecordList

CURSOR_PREFIX = "offset:"

PAGE_INFO_TYPE = GraphQLObjectType(
    "PageInfo",
    fields=lambda: {
        "hasNextPage": GraphQLField(GraphQLNonNull(GraphQLBoolean)),
        "hasPreviousPage": GraphQLField(GraphQLNonNull(GraphQLBoolean)),
        "totalCount": GraphQLField(GraphQLNonNull(GraphQLInt)),
    },
    description="Information about the current page of a connection",
)


def encode_cursor(index: int) -> str:
    return base64.b64encode(f"{CURSOR_PREFIX}{index}".encode()).decode("ascii")


def decode_cursor(cursor: str) -> int:
    """Decode a cursor back into the item index it points to.

    Raises:
        ValueError: If the cursor was not produced by :func:`encode_cursor`
    """
    try:
        decoded = base64.b64decode(cursor.encode("ascii"), validate=True).decode("ascii")
    except (binascii.Error, UnicodeError) as e:
        raise ValueError(f"Invalid cursor '{cursor}'") from e
    if not decoded.startswith(CURSOR_PREFIX) or not decoded[len(CURSOR_PREFIX) :].isdigit():
        raise ValueError(f"Invalid cursor '{cursor}'")
    return int(decoded[len(CURSOR_PREFIX) :])


def empty_connection() -> dict[str, Any]:
    return {
        "edges": [],
        "pageInfo": {"hasNextPage": False, "hasPreviousPage": False, "totalCount": 0},
    }


@dataclass(frozen=True)
class Connection:
    """Build-time description of a paginated list.

    The node type is given as a thunk so that a connection can be created
    before the type it wraps is registered.
    """

    name: str
    node_type: Callable[[], GraphQLOutputType]
    limit: int
    maximum_limit: int

    @property
    def connection_name(self) -> str:
        return f"{self.name}Connection"

    @property
    def edge_name(self) -> str:
        return f"{self.name}Edge"

    def to_type(self) -> GraphQLObjectType:
        edge_type = GraphQLObjectType(
            self.edge_name,
            fields=lambda: {
                "node": GraphQLField(self.node_type()),
                "cursor": GraphQLField(GraphQLNonNull(GraphQLString)),
            },
        )
        return GraphQLObjectType(
            self.connection_name,
            fields=lambda: {
                "pageInfo": GraphQLField(GraphQLNonNull(PAGE_INFO_TYPE)),
                "edges": GraphQLField(GraphQLNonNull(GraphQLList(GraphQLNonNull(edge_type)))),
            },
        )

    def args(self) -> dict[str, GraphQLArgument]:
        return {
            "limit": GraphQLArgument(GraphQLInt, default_value=self.limit),
            "offset": GraphQLArgument(GraphQLInt, default_value=0),
            "after": GraphQLArgument(GraphQLString, description="Cursor of the edge to start after"),
        }

    def page_size(self, requested: int | None) -> int:
        """Clamp a requested page size to ``[0, maximum_limit]``."""
        if requested is None:
            requested = self.limit
        return max(0, min(requested, self.maximum_limit))

    def resolve(self, results: RecordList, args: dict[str, Any]) -> dict[str, Any]:
        """Slice ``results`` into a page of edges.

        ``totalCount`` always reflects the whole result set. An ``after``
        cursor takes precedence over ``offset``.
        """
        after = args.get("after")
        offset = decode_cursor(after) + 1 if after else max(args.get("offset") or 0, 0)
        limit = self.page_size(args.get("limit"))
        page = results.limit(limit, offset)
        total = len(results)
        return {
            "edges": [{"node": node, "cursor": encode_cursor(offset + index)} for index, node in enumerate(page)],
            "pageInfo": {
                "hasNextPage": offset + len(page) < total,
                "hasPreviousPage": offset > 0,
                "totalCount": total,
            },
        }
