"""barbeat MCP server — bar|beat notation tools over in-memory clips."""

from fastmcp import FastMCP

from barbeat.config import Settings
from barbeat.logger_config import configure_logging
from barbeat.server.clips import ClipService
from barbeat.server.tools import register_tools

settings = Settings.from_env()

service = ClipService(settings)

mcp = FastMCP(
    name="barbeat",
    instructions="bar|beat notation for clip notes. Call notation_help for the reference card.",
)
register_tools(mcp, service)


def main() -> None:
    configure_logging(settings.log_level)
    mcp.run()


if __name__ == "__main__":
    main()
