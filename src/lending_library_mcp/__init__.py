"""
Lending Library MCP Server Package.

An MCP (Model Context Protocol) server for checking library items out to
members and taking them back.

Key Components:
- models: Pydantic snapshots of members, catalog items and loans
- database: SQLAlchemy schema, repositories and session management
- services: The loan service holding the checkout and return rules
- tools: MCP tools wrapping the loan service
- config: Configuration management with pydantic-settings
"""

__version__ = "0.1.0"

from . import database

__all__ = [
    "__version__",
    "database",
]
