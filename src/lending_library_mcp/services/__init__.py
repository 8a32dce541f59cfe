"""
Domain services for the Lending Library MCP Server.

Services hold the business rules and sit between the tools (request
handling) and the repositories (data access).
"""

from .loan_service import LoanService

__all__ = ["LoanService"]
