"""Lending Library MCP Server - FastMCP Implementation

Exposes the loan service over MCP. Clients connect via stdio (or streamable
HTTP) and call the loan tools to check items out and bring them back.

Features exposed:
- Tools: checkout_items, get_member_loans, get_loan, return_items
"""

import logging
import signal
import sys
from typing import Any

from fastmcp import FastMCP

from lending_library_mcp.config import get_config
from lending_library_mcp.database import get_db_manager, seed_library
from lending_library_mcp.tools import all_tools

# Initialize logging - stderr for logs, stdout for MCP protocol
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)

logger = logging.getLogger(__name__)

config = get_config()

mcp = FastMCP(
    name=config.server_name,
    version=config.server_version,
    instructions=(
        "Lending Library MCP Server - checks books and journals out to members "
        "and takes them back. Use checkout_items to open a loan, get_member_loans "
        "and get_loan to inspect loans, and return_items to close them."
    ),
)

for tool in all_tools:
    logger.debug("Registering tool: %s", tool["name"])
    try:
        mcp.tool(
            name=tool["name"],
            description=tool["description"],
        )(tool["handler"])
    except Exception:
        logger.exception("Failed to register tool %s", tool["name"])
        raise

logger.info("Registered %d tools", len(all_tools))


def prepare_database() -> None:
    """Create the schema and, when configured, load the sample catalog."""
    db = get_db_manager(config.get_database_url())
    if not db.verify_connection():
        raise RuntimeError(f"Cannot connect to database at {config.database_path}")

    db.init_database()

    if config.seed_on_startup:
        with db.session_scope() as session:
            seed_library(session)


def configure_logging() -> None:
    logging.getLogger().setLevel(config.log_level.upper())

    if config.is_development:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Development mode - verbose protocol logging active")
    else:
        logging.getLogger("fastmcp").setLevel(logging.WARNING)


def run_server() -> None:
    """Run the MCP server on the configured transport.

    With stdio, stdin receives JSON-RPC requests and stdout sends responses,
    so nothing but the protocol may be written to stdout.
    """
    logger.info(
        "Starting %s v%s on %s transport",
        config.server_name,
        config.server_version,
        config.transport,
    )

    def signal_handler(signum: int, _frame: Any) -> None:
        logger.info("Received signal %s, initiating shutdown...", signum)
        get_db_manager().close()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        logger.info("MCP Server ready and waiting for connections...")
        if config.transport == "stdio":
            mcp.run(transport="stdio")
        else:
            mcp.run(transport="streamable-http")
    except Exception:
        logger.exception("Fatal error in MCP server")
        sys.exit(1)


def main() -> None:
    """Main entry point for the MCP server.

    Called via ``python -m lending_library_mcp.server`` or the
    ``lending-library-mcp`` console script.
    """
    try:
        configure_logging()

        logger.info("=" * 60)
        logger.info("Lending Library MCP Server")
        logger.info("Version: %s", config.server_version)
        logger.info("Transport: %s", config.transport)
        logger.info("Database: %s", config.database_path)
        logger.info("Debug Mode: %s", config.debug)
        logger.info("=" * 60)

        prepare_database()
        run_server()

    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception:
        logger.exception("Failed to start MCP server")
        sys.exit(1)


if __name__ == "__main__":
    main()
