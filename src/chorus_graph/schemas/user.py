"""User directory schemas."""

from pydantic import BaseModel, ConfigDict


class UserSummary(BaseModel):
    """Public identity of a user."""

    id: str
    username: str
    display_name: str | None = None

    model_config = ConfigDict(from_attributes=True)
