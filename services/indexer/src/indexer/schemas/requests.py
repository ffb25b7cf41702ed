from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from services.indexer.src.indexer.domain.models import Action


class ActionRequest(BaseModel):
    """Query over the actions table. Unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore")

    kind: Action
    address: str | None = None

    @field_validator("kind", mode="before")
    @classmethod
    def _parse_kind(cls, value: Any) -> Any:
        """Accept an integer tag or a variant name; no other coercion."""
        if isinstance(value, Action):
            return value
        # Older callers send the variant name instead of the tag
        if isinstance(value, str):
            for action in Action:
                if value == action.name.title():
                    return action
            raise ValueError(f"unknown action {value!r}")
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        raise ValueError("kind must be an integer tag or a variant name")
