"""
Member model for the Lending Library MCP Server.

Members are the people who borrow items. Registration itself happens
outside the checkout workflow (the seeder or an administrator); the loan
service only looks members up.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class Member(BaseModel):
    """A registered library member."""

    id: int = Field(
        ...,
        description="Identifier assigned when the member is registered",
        ge=1,
        examples=[1, 42],
    )

    first_name: str = Field(
        ...,
        description="Member's given name",
        min_length=1,
        max_length=100,
        examples=["Alice", "Bob"],
    )

    last_name: str = Field(
        ...,
        description="Member's family name",
        min_length=1,
        max_length=100,
        examples=["Johnson", "Williams"],
    )

    email: EmailStr = Field(
        ...,
        description="Unique contact address",
        examples=["alice@example.com"],
    )

    created_at: datetime | None = Field(
        None,
        description="When the member was registered",
    )

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "first_name": "Alice",
                "last_name": "Johnson",
                "email": "alice@example.com",
            }
        },
    )
