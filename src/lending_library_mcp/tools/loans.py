"""
Loan tools implementation for the Lending Library MCP Server.

This module exposes the loan service as MCP tools:
1. checkout_items: open a loan for a member
2. get_member_loans: list a member's loans, newest first
3. get_loan: show one loan with its items
4. return_items: return some or all items of a loan

Each handler validates its arguments, runs the service inside
``session_scope()`` (so a failing call leaves the database untouched) and
turns domain errors into error responses carrying an HTTP-style status:

- MemberNotFound / ItemNotFound / LoanNotFound -> 404
- ItemNotAvailable / InvalidLoanState          -> 409
- invalid arguments                            -> 400
- anything else                                -> 500, details only in the log
"""

import logging
from collections.abc import Callable
from datetime import datetime
from http import HTTPStatus
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from ..database.session import session_scope
from ..errors import (
    InvalidLoanStateError,
    ItemNotAvailableError,
    ItemNotFoundError,
    LoanDomainError,
    LoanNotFoundError,
    LoanValidationError,
    MemberNotFoundError,
)
from ..models.loan import Loan, LoanSummary
from ..services.loan_service import LoanService

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[LoanDomainError], HTTPStatus] = {
    MemberNotFoundError: HTTPStatus.NOT_FOUND,
    ItemNotFoundError: HTTPStatus.NOT_FOUND,
    LoanNotFoundError: HTTPStatus.NOT_FOUND,
    ItemNotAvailableError: HTTPStatus.CONFLICT,
    InvalidLoanStateError: HTTPStatus.CONFLICT,
    LoanValidationError: HTTPStatus.BAD_REQUEST,
}


# =============================================================================
# INPUT SCHEMAS
# =============================================================================


class CheckoutItemsInput(BaseModel):
    """Input schema for the checkout_items tool."""

    member_id: int = Field(
        ...,
        description="ID of the member borrowing the items",
        ge=1,
        examples=[1],
    )

    items: list[int] = Field(
        ...,
        description="Catalog item IDs to check out, in the order they should appear on the loan",
        min_length=1,
        examples=[[1, 2, 3]],
    )


class MemberLoansInput(BaseModel):
    """Input schema for the get_member_loans tool."""

    member_id: int = Field(..., description="ID of the member", ge=1, examples=[1])


class GetLoanInput(BaseModel):
    """Input schema for the get_loan tool."""

    loan_id: int = Field(..., description="ID of the loan", ge=1, examples=[5])


class ReturnItemsInput(BaseModel):
    """
    Input schema for the return_items tool.

    Leaving ``items`` out, null or empty returns everything still on loan.
    """

    loan_id: int = Field(..., description="ID of the loan", ge=1, examples=[5])

    items: list[int] | None = Field(
        default=None,
        description="Catalog item IDs to return; null or empty returns all outstanding items",
        examples=[[10], [], None],
    )


# =============================================================================
# RESPONSE HELPERS
# =============================================================================


def status_for(error: Exception) -> HTTPStatus:
    """Map an exception to the status reported to the client."""
    for error_class, status in ERROR_STATUS.items():
        if isinstance(error, error_class):
            return status
    return HTTPStatus.INTERNAL_SERVER_ERROR


def error_response(tool: str, status: HTTPStatus, message: str) -> dict[str, Any]:
    """Build an MCP error result with a structured error body."""
    return {
        "isError": True,
        "content": [{"type": "text", "text": message}],
        "error": {
            "timestamp": datetime.now().isoformat(),
            "status": status.value,
            "error": status.phrase,
            "message": message,
            "tool": tool,
        },
    }


def loan_payload(loan: Loan) -> dict[str, Any]:
    """Structured representation of a loan and its items."""
    return {
        "id": loan.id,
        "member_id": loan.member_id,
        "loan_date": loan.loan_date.isoformat(),
        "expected_return_date": loan.expected_return_date.isoformat(),
        "status": loan.status.value,
        "items": [
            {
                "id": loan_item.item.id,
                "title": loan_item.item.title,
                "type": loan_item.item.type,
                "returned_date": (
                    loan_item.returned_date.isoformat() if loan_item.returned_date else None
                ),
            }
            for loan_item in loan.items
        ],
    }


def _run(operation: Callable[[LoanService], Any]) -> Any:
    """Run ``operation`` against a fresh service in its own transaction."""
    with session_scope() as session:
        return operation(LoanService.from_session(session))


def _failure(tool: str, error: Exception) -> dict[str, Any]:
    """Log and convert an exception raised while running a tool."""
    status = status_for(error)
    if status == HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.error("Unexpected error in %s tool", tool, exc_info=error)
        return error_response(tool, status, "An unexpected error occurred")

    logger.info("%s failed (%d): %s", tool, status.value, error)
    return error_response(tool, status, str(error))


def _invalid(tool: str, error: ValidationError) -> dict[str, Any]:
    logger.warning("Invalid %s parameters: %s", tool, error)
    return error_response(tool, HTTPStatus.BAD_REQUEST, f"Invalid parameters: {error}")


# =============================================================================
# TOOL HANDLERS
# =============================================================================


async def checkout_items_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """
    Handler for the checkout_items tool.

    Either every requested item is reserved and the loan is created, or the
    transaction is rolled back and nothing changes.
    """
    try:
        params = CheckoutItemsInput.model_validate(arguments)
    except ValidationError as e:
        return _invalid("checkout_items", e)

    logger.info("Checkout request for member %s: %d items", params.member_id, len(params.items))
    try:
        loan: Loan = _run(
            lambda service: service.checkout(params.member_id, params.items)
        )
    except Exception as e:
        return _failure("checkout_items", e)

    return {
        "content": [
            {
                "type": "text",
                "text": (
                    f"Loan {loan.id} created for member {loan.member_id} with "
                    f"{len(loan.items)} item(s). Due back "
                    f"{loan.expected_return_date.strftime('%B %d, %Y')}."
                ),
            }
        ],
        "data": {"loan": loan_payload(loan)},
    }


async def get_member_loans_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handler for the get_member_loans tool."""
    try:
        params = MemberLoansInput.model_validate(arguments)
    except ValidationError as e:
        return _invalid("get_member_loans", e)

    logger.info("Fetching loans for member %s", params.member_id)
    try:
        member, loans = _run(
            lambda service: (
                service.get_member(params.member_id),
                service.get_member_loans(params.member_id),
            )
        )
    except Exception as e:
        return _failure("get_member_loans", e)

    summaries = [LoanSummary.from_loan(loan).model_dump(mode="json") for loan in loans]
    open_count = sum(1 for loan in loans if not loan.is_closed)

    return {
        "content": [
            {
                "type": "text",
                "text": (
                    f"{member.full_name} (member {member.id}) has {len(loans)} loan(s), "
                    f"{open_count} open."
                ),
            }
        ],
        "data": {"member": member.model_dump(mode="json"), "loans": summaries},
    }


async def get_loan_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handler for the get_loan tool."""
    try:
        params = GetLoanInput.model_validate(arguments)
    except ValidationError as e:
        return _invalid("get_loan", e)

    logger.info("Fetching loan details for loan %s", params.loan_id)
    try:
        loan: Loan = _run(lambda service: service.get_loan_by_id(params.loan_id))
    except Exception as e:
        return _failure("get_loan", e)

    outstanding = len(loan.active_items)
    return {
        "content": [
            {
                "type": "text",
                "text": (
                    f"Loan {loan.id} ({loan.status.value}): {len(loan.items)} item(s), "
                    f"{outstanding} outstanding."
                ),
            }
        ],
        "data": {"loan": loan_payload(loan)},
    }


async def return_items_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """
    Handler for the return_items tool.

    Items that were already returned are skipped, so repeating a call is safe.
    """
    try:
        params = ReturnItemsInput.model_validate(arguments)
    except ValidationError as e:
        return _invalid("return_items", e)

    logger.info("Return request for loan %s", params.loan_id)
    try:
        loan: Loan = _run(
            lambda service: service.return_items(params.loan_id, params.items)
        )
    except Exception as e:
        return _failure("return_items", e)

    if loan.is_closed:
        message = f"All items of loan {loan.id} are back. The loan is closed."
    else:
        message = f"Loan {loan.id} still has {len(loan.active_items)} item(s) out."

    return {
        "content": [{"type": "text", "text": message}],
        "data": {"loan": loan_payload(loan)},
    }


# =============================================================================
# TOOL DEFINITIONS
# =============================================================================

checkout_items = {
    "name": "checkout_items",
    "description": (
        "Check out one or more catalog items to a member. Every item must exist and be "
        "available; the new loan is due back in 14 days."
    ),
    "inputSchema": CheckoutItemsInput.model_json_schema(),
    "handler": checkout_items_handler,
}

get_member_loans = {
    "name": "get_member_loans",
    "description": "List a member's loans, newest first, with their due dates and status.",
    "inputSchema": MemberLoansInput.model_json_schema(),
    "handler": get_member_loans_handler,
}

get_loan = {
    "name": "get_loan",
    "description": "Show a loan with each item's title, type and return date.",
    "inputSchema": GetLoanInput.model_json_schema(),
    "handler": get_loan_handler,
}

return_items = {
    "name": "return_items",
    "description": (
        "Return items of an open loan. Omit 'items' to return everything still out. "
        "The loan closes once every item is back."
    ),
    "inputSchema": ReturnItemsInput.model_json_schema(),
    "handler": return_items_handler,
}
