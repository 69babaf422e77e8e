"""Pydantic schemas for the prompt catalog."""

from pydantic import BaseModel, ConfigDict, Field


class PromptResponse(BaseModel):
    """Response schema for one weekly prompt."""

    model_config = ConfigDict(from_attributes=True)

    prompt_key: str = Field(description="Stable prompt identifier")
    week: int = Field(description="Week number (1-52)")
    title: str = Field(description="Prompt title")
    category: str = Field(default="", description="Life category")
    coaching: str = Field(default="", description="Coaching notes shown with the prompt")
    questions: list[str] = Field(default_factory=list, description="Questions to answer")
    helpful_followups: list[str] = Field(default_factory=list, description="Follow-up ideas")
    active: bool = Field(default=True, description="Whether the prompt is in the catalog")


class PromptListResponse(BaseModel):
    """The active prompt catalog."""

    total: int = Field(description="Number of active prompts")
    results: list[PromptResponse] = Field(default_factory=list)
