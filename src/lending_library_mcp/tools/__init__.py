"""
MCP tools for the Lending Library Server.

Each tool is a dictionary with a name, a description, the JSON schema of its
arguments and an async handler. The server registers everything in
``all_tools`` at startup.
"""

from .loans import checkout_items, get_loan, get_member_loans, return_items

all_tools = [
    checkout_items,
    get_member_loans,
    get_loan,
    return_items,
]

__all__ = [
    "all_tools",
    "checkout_items",
    "get_loan",
    "get_member_loans",
    "return_items",
]
