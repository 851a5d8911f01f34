"""Base entity for decision models."""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class BaseEntity(BaseModel):
    """Identity and timestamps shared by decision entities.

    The id of a Decision is also the id its session is addressed by,
    and survives a reset. updated_at moves on every edit of the title,
    options or criteria.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_default=True,
        from_attributes=True,
    )

    id: UUID = Field(default_factory=uuid4, description="Entity identifier")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the entity was started",
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the entity was last edited",
    )

    def touch(self) -> None:
        """Record an edit."""
        self.updated_at = datetime.now(UTC)
