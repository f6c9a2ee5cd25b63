"""Fetch tool definitions from a running MCP server.

A server is either an ``http://`` / ``https://`` URL (streamable HTTP
transport) or a command line started over stdio, e.g.
``"python -m my_server"``.  All network I/O happens here and finishes
before validation starts.
"""

from __future__ import annotations

import asyncio
import logging
import shlex
from contextlib import asynccontextmanager
from importlib.metadata import version
from typing import TYPE_CHECKING, Any

from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client
from mcp.client.streamable_http import streamablehttp_client
from mcp.types import Implementation

from mcpvet.core._types import SourceKind
from mcpvet.core.loader import LoadError
from mcpvet.core.tool import ToolDefinition

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger("mcpvet")

DEFAULT_TIMEOUT = 30.0


def is_http_server(server: str) -> bool:
    return server.startswith(("http://", "https://"))


@asynccontextmanager
async def _open_streams(server: str) -> AsyncIterator[tuple[Any, Any]]:
    if is_http_server(server):
        async with streamablehttp_client(server) as (read, write, _):
            yield read, write
    else:
        command, *args = shlex.split(server)
        params = StdioServerParameters(command=command, args=args)
        async with stdio_client(params) as (read, write):
            yield read, write


async def fetch_server_tools(server: str) -> list[dict[str, Any]]:
    """Connect to *server* and return its ``tools/list`` entries as plain dicts.

    Follows ``nextCursor`` until the server reports no further pages.
    """
    client_info = Implementation(name="mcpvet", version=version("mcpvet"))
    entries: list[dict[str, Any]] = []
    async with (
        _open_streams(server) as (read, write),
        ClientSession(read, write, client_info=client_info) as session,
    ):
        await session.initialize()
        cursor: str | None = None
        while True:
            response = await session.list_tools(cursor=cursor)
            entries.extend(
                tool.model_dump(mode="json", by_alias=True, exclude_none=True)
                for tool in response.tools
            )
            cursor = response.nextCursor
            if not cursor:
                break
    return entries


def load_server_tools(server: str, *, timeout: float = DEFAULT_TIMEOUT) -> list[ToolDefinition]:
    """Fetch the tools a live MCP server advertises.

    Each tool's ``source`` has kind ``server``, *server* as its location and
    the ``tools/list`` entry as ``raw``.  *timeout* (seconds) bounds the
    whole connect, handshake and listing round-trip.

    Raises:
        :class:`~mcpvet.core.loader.LoadError`: If *server* is blank, the
            connection fails or times out, or the server rejects a request.

    """
    if not server.strip():
        msg = "MCP server must be an http(s) URL or a command to run"
        raise LoadError(msg)

    logger.debug("Fetching tools from MCP server %s", server)
    try:
        entries = asyncio.run(asyncio.wait_for(fetch_server_tools(server), timeout))
    except TimeoutError as exc:
        msg = f"Connection to MCP server {server!r} timed out after {timeout:g}s"
        raise LoadError(msg) from exc
    except Exception as exc:
        msg = f"Cannot fetch tools from MCP server {server!r}: {exc}"
        raise LoadError(msg) from exc

    logger.info("Fetched %d tool(s) from %s", len(entries), server)
    return [
        ToolDefinition.from_dict(entry, kind=SourceKind.SERVER, location=server)
        for entry in entries
    ]
