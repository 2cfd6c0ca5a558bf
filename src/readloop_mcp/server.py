"""
MCP Server for Readloop.

Exposes the saved-text library as tools for MCP clients.
"""

import logging

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from readloop.store import open_store
from readloop.surfacing import format_entries, format_entry

logger = logging.getLogger(__name__)

# Create MCP server
server = Server("readloop")

NOT_SAVED = "Error: Change was not saved to storage (see server log)"


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="readloop_save",
            description="Save a block of text to the readloop library. Returns the new entry ID.",
            inputSchema={
                "type": "object",
                "properties": {
                    "text": {
                        "type": "string",
                        "description": "The text to save",
                    },
                },
                "required": ["text"],
            },
        ),
        Tool(
            name="readloop_list",
            description="List saved entries in order, each with its position, short ID and three-line preview.",
            inputSchema={
                "type": "object",
                "properties": {},
            },
        ),
        Tool(
            name="readloop_get",
            description="Get the full text of one saved entry.",
            inputSchema={
                "type": "object",
                "properties": {
                    "entry_id": {
                        "type": "string",
                        "description": "The entry ID (or a unique prefix of it)",
                    },
                },
                "required": ["entry_id"],
            },
        ),
        Tool(
            name="readloop_delete",
            description="Delete one saved entry by ID.",
            inputSchema={
                "type": "object",
                "properties": {
                    "entry_id": {
                        "type": "string",
                        "description": "The entry ID (or a unique prefix of it)",
                    },
                },
                "required": ["entry_id"],
            },
        ),
        Tool(
            name="readloop_delete_at",
            description="Delete several entries by list position (1-based, as shown by readloop_list) in one batch.",
            inputSchema={
                "type": "object",
                "properties": {
                    "positions": {
                        "type": "array",
                        "items": {"type": "integer"},
                        "description": "Positions to delete, all relative to the current list",
                    },
                },
                "required": ["positions"],
            },
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    """Handle tool calls."""
    try:
        if name == "readloop_save":
            return await tool_save(arguments)
        elif name == "readloop_list":
            return await tool_list(arguments)
        elif name == "readloop_get":
            return await tool_get(arguments)
        elif name == "readloop_delete":
            return await tool_delete(arguments)
        elif name == "readloop_delete_at":
            return await tool_delete_at(arguments)
        else:
            return [TextContent(type="text", text=f"Unknown tool: {name}")]
    except Exception as e:
        logger.exception("Tool %s failed", name)
        return [TextContent(type="text", text=f"Error: {e}")]


async def tool_save(args: dict) -> list[TextContent]:
    """Save text."""
    store = open_store()
    entry = store.create(args.get("text", ""))
    if entry is None:
        return [TextContent(type="text", text="Error: Empty text")]
    if not store.persisted:
        return [TextContent(type="text", text=NOT_SAVED)]

    return [TextContent(type="text", text=f"Saved: {entry.id}")]


async def tool_list(args: dict) -> list[TextContent]:
    """List entries."""
    store = open_store()
    return [TextContent(type="text", text=format_entries(store.list()))]


async def tool_get(args: dict) -> list[TextContent]:
    """Get one entry."""
    entry_id = args.get("entry_id", "").strip()
    if not entry_id:
        return [TextContent(type="text", text="Error: No entry_id provided")]

    store = open_store()
    entry = store.find(entry_id)
    if entry is None:
        return [TextContent(type="text", text=f"Entry not found: {entry_id}")]

    position = store.list().index(entry) + 1
    return [TextContent(type="text", text=format_entry(entry, position))]


async def tool_delete(args: dict) -> list[TextContent]:
    """Delete one entry."""
    entry_id = args.get("entry_id", "").strip()
    if not entry_id:
        return [TextContent(type="text", text="Error: No entry_id provided")]

    store = open_store()
    entry = store.find(entry_id)
    if entry is None:
        return [TextContent(type="text", text=f"Entry not found: {entry_id}")]

    store.delete_by_id(entry.id)
    if not store.persisted:
        return [TextContent(type="text", text=NOT_SAVED)]
    return [TextContent(type="text", text=f"Deleted: {entry.id}")]


async def tool_delete_at(args: dict) -> list[TextContent]:
    """Delete entries by position."""
    positions = args.get("positions") or []
    if not positions:
        return [TextContent(type="text", text="Error: No positions provided")]

    store = open_store()
    removed = store.delete_at_positions({int(p) - 1 for p in positions})
    if not removed:
        return [TextContent(type="text", text="Nothing deleted.")]
    if not store.persisted:
        return [TextContent(type="text", text=NOT_SAVED)]

    lines = [f"Deleted {len(removed)} entries:"]
    lines.extend(f"  {entry.id}" for entry in removed)
    return [TextContent(type="text", text="\n".join(lines))]


async def main():
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def run() -> None:
    """Console entry point. Logs go to stderr; stdout is the protocol channel."""
    import asyncio

    from readloop.cli import setup_logging

    setup_logging()
    asyncio.run(main())


if __name__ == "__main__":
    run()
