"""Pydantic schemas for the Resend email API."""

from pydantic import BaseModel, ConfigDict, Field


class EmailMessage(BaseModel):
    """Request body for POST /emails."""

    model_config = ConfigDict(populate_by_name=True)

    sender: str = Field(alias="from", description="Sender, e.g. 'Name <addr@domain>'")
    to: list[str] = Field(description="Recipient addresses")
    subject: str
    html: str


class EmailSendResult(BaseModel):
    """Response body for POST /emails."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = Field(default=None, description="Resend message ID")
