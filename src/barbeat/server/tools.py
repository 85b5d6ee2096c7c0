"""FastMCP tool registrations for barbeat."""

from __future__ import annotations

from fastmcp import FastMCP

from barbeat.server.clips import ClipService
from barbeat.server.reference_card import REFERENCE_CARD, build_tool_description


def register_tools(mcp: FastMCP, service: ClipService) -> None:
    """Register the clip tools on the given MCP server."""

    # The reference card goes into the description so the model sees the
    # syntax on connect, without a notation_help() round trip.
    notes_description = build_tool_description()

    @mcp.tool(description="Create a clip. " + notes_description)
    def create_clip(
        clip_id: str,
        notes: str = "",
        time_signature: str | None = None,
        length: str | None = None,
    ) -> str:
        return service.create_clip(clip_id, notes, time_signature, length)

    @mcp.tool(description="Update a clip's notes (mode: replace | merge). " + notes_description)
    def update_clip(clip_id: str, notes: str, mode: str | None = None) -> str:
        return service.update_clip(clip_id, notes, mode)

    @mcp.tool
    def read_clip(clip_id: str = "") -> str:
        """Show a clip's notes in bar|beat notation; no id lists the clips."""
        return service.read_clip(clip_id)

    @mcp.tool
    def resize_clip(clip_id: str, length: str) -> str:
        """Set a clip's length as bars:beats, e.g. '8:0'. Longer than the
        content repeats it in tiles."""
        return service.resize_clip(clip_id, length)

    @mcp.tool
    def notation_help() -> str:
        """Returns the bar|beat notation reference card."""
        return REFERENCE_CARD
