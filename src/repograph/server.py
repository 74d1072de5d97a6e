"""
MCP Server for RepoGraph.

This module implements the Model Context Protocol (MCP) server that exposes
repository mapping tools to AI assistants.

The MCP Protocol:
    1. Registers tools via @app.list_tools()
    2. Handles tool invocations via @app.call_tool()
    3. Communicates via stdio (standard input/output)

Available Tools:
    - analyze_repository: Map a GitHub repository (graph, schema, diagrams)
    - analyze_local_repository: Map a local checkout
    - generate_diagram: Render one Mermaid diagram (architecture, sequence, erd)
    - summarize_file: Describe one file, cached by content
    - get_cache_stats: Entry counts of the result caches

The server owns one ``AnalysisCaches`` instance for its lifetime and passes
it to every remote analysis, so repeated requests for a repository are
served from the cache until the entry expires.

Usage:
    # Start the server directly
    python -m repograph.server

    # Or via the CLI
    repograph serve

Author: RepoGraph Team
"""

import asyncio
import json
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .constants import APPLICATION_NAME, DiagramType, MCPToolName
from .logging import get_logger, log_operation_end, log_operation_start
from .services.cache import AnalysisCaches
from .tools.analyze_repo import analyze_local_repository, analyze_repository
from .tools.file_summary import summarize_file
from .tools.generate_diagrams import generate_diagram


# Module logger
logger = get_logger(__name__)

# Create MCP server instance
app = Server(APPLICATION_NAME.lower())

# Result caches shared by all requests to this server
caches = AnalysisCaches.from_config()


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name=MCPToolName.ANALYZE_REPOSITORY.value,
            description="""Map the structure and architecture of a GitHub repository.

Builds a folder/file graph, resolves relative imports into dependency edges,
classifies every file by architectural role (entry, controller, api, service,
model, util, config, test), parses schema files, and renders Mermaid diagrams
(architecture flow, ERD, and one sequence diagram per API endpoint).

Use this tool when you need to:
- Get an overview of an unfamiliar repository
- Find entry points, API routes, services and models
- See which files depend on which""",
            inputSchema={
                "type": "object",
                "properties": {
                    "repository": {
                        "type": "string",
                        "description": "GitHub URL or owner/repo",
                    },
                    "include_contents": {
                        "type": "boolean",
                        "description": "Include the fetched file texts in the response",
                        "default": False,
                    },
                },
                "required": ["repository"],
            },
        ),
        Tool(
            name=MCPToolName.ANALYZE_LOCAL_REPOSITORY.value,
            description="""Map a repository checked out on the local filesystem.

Same output as analyze_repository. Dotfiles, .gitignore entries and the
configured ignore patterns are skipped. Results are not cached.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": "Path to the repository root",
                    },
                    "include_contents": {
                        "type": "boolean",
                        "default": False,
                    },
                },
                "required": ["path"],
            },
        ),
        Tool(
            name=MCPToolName.GENERATE_DIAGRAM.value,
            description="""Render a single Mermaid diagram for a repository.

Diagram types:
- architecture: files linked by import/call edges, styled by role
- sequence: illustrative request flow for one API endpoint
- erd: entities and relations parsed from schema files""",
            inputSchema={
                "type": "object",
                "properties": {
                    "repository": {
                        "type": "string",
                        "description": "GitHub URL, owner/repo, or a local path when local=true",
                    },
                    "diagram_type": {
                        "type": "string",
                        "enum": [t.value for t in DiagramType],
                        "default": DiagramType.ARCHITECTURE.value,
                    },
                    "endpoint": {
                        "type": "string",
                        "description": "API file path for sequence diagrams (first endpoint if omitted)",
                    },
                    "local": {
                        "type": "boolean",
                        "default": False,
                    },
                },
                "required": ["repository"],
            },
        ),
        Tool(
            name=MCPToolName.SUMMARIZE_FILE.value,
            description="""Describe one file: language, length, defined symbols, external API calls.

Summaries are cached by file content, so asking again for identical text
is answered from the cache.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "file_path": {
                        "type": "string",
                        "description": "Path of the file, used for its language",
                    },
                    "content": {
                        "type": "string",
                        "description": "Text of the file",
                    },
                },
                "required": ["file_path", "content"],
            },
        ),
        Tool(
            name=MCPToolName.GET_CACHE_STATS.value,
            description="Show entry counts and capacity of the analysis caches.",
            inputSchema={"type": "object", "properties": {}},
        ),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """
    Handle incoming tool invocations from MCP clients.

    Args:
        name: Name of the tool being invoked.
        arguments: Dictionary of arguments passed to the tool.

    Returns:
        List containing a single TextContent with JSON-formatted results.
    """
    start_time = log_operation_start(
        logger, f"tool_call:{name}",
        tool_name=name,
    )

    try:
        result = await _execute_tool(name, arguments or {})

        log_operation_end(
            logger, f"tool_call:{name}", start_time,
            success="error" not in result,
        )

        return [TextContent(
            type="text",
            text=json.dumps(result, indent=2, default=str)
        )]

    except Exception as error:
        log_operation_end(
            logger, f"tool_call:{name}", start_time,
            success=False,
            error=str(error)
        )

        error_response = {
            "error": str(error),
            "tool": name,
            "arguments": arguments,
        }

        return [TextContent(
            type="text",
            text=json.dumps(error_response, indent=2, default=str)
        )]


async def _execute_tool(name: str, arguments: dict[str, Any]) -> dict:
    """
    Execute a specific tool by name.

    Raises:
        ValueError: If tool name is unknown.
        KeyError: If a required argument is missing.
    """
    if name == MCPToolName.ANALYZE_REPOSITORY.value:
        return await analyze_repository(
            repository=arguments["repository"],
            include_contents=arguments.get("include_contents", False),
            caches=caches,
        )

    elif name == MCPToolName.ANALYZE_LOCAL_REPOSITORY.value:
        return await analyze_local_repository(
            path=arguments["path"],
            include_contents=arguments.get("include_contents", False),
        )

    elif name == MCPToolName.GENERATE_DIAGRAM.value:
        return await generate_diagram(
            repository=arguments["repository"],
            diagram_type=arguments.get("diagram_type", DiagramType.ARCHITECTURE.value),
            endpoint=arguments.get("endpoint"),
            local=arguments.get("local", False),
            caches=caches,
        )

    elif name == MCPToolName.SUMMARIZE_FILE.value:
        return summarize_file(
            content=arguments["content"],
            file_path=arguments["file_path"],
            caches=caches,
        )

    elif name == MCPToolName.GET_CACHE_STATS.value:
        return caches.stats()

    else:
        raise ValueError(f"Unknown tool: {name}")


async def main():
    """Run the MCP server with stdio transport."""
    logger.info("Starting RepoGraph MCP server")

    async with stdio_server() as (read_stream, write_stream):
        logger.info("MCP server ready, waiting for connections")
        await app.run(
            read_stream,
            write_stream,
            app.create_initialization_options()
        )

    logger.info("MCP server shut down")


def run_server():
    """Entry point for running the server."""
    asyncio.run(main())


if __name__ == "__main__":
    run_server()
