"""Requests and Response models"""

from typing import Any, Iterable, Literal, Optional, Self

from pydantic import BaseModel, ValidationError, field_validator

from slackchess.core.exceptions import TransportDecodeError


# --- REQUEST MODELS ---
class SlashCommand(BaseModel):
    """Form fields posted by Slack for a slash command. Unknown fields are ignored."""

    token: str
    channel_id: str
    user_id: str
    text: str
    team_id: Optional[str] = None
    team_domain: Optional[str] = None
    channel_name: Optional[str] = None
    user_name: Optional[str] = None
    command: Optional[str] = None
    response_url: Optional[str] = None

    @field_validator(*["token", "channel_id", "user_id"])
    @classmethod
    def validate_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("text")
    @classmethod
    def validate_text(cls, value: str) -> str:
        return value.strip()

    @classmethod
    def from_form_items(cls, items: Iterable[tuple[str, Any]]) -> Self:
        """Decode named form fields. Every field must be plain text and appear at most once."""
        fields: dict[str, str] = {}
        for key, value in items:
            if not isinstance(value, str):
                raise TransportDecodeError(f"form field {key!r} must be text")
            if key in fields:
                raise TransportDecodeError(f"form field {key!r} given more than once")
            fields[key] = value

        try:
            return cls.model_validate(fields)
        except ValidationError as e:
            raise TransportDecodeError(str(e)) from e


# --- RESPONSE MODELS ---
class Attachment(BaseModel):
    text: str
    image_url: Optional[str] = None


class SlackResponse(BaseModel):
    response_type: Literal["in_channel", "ephemeral"]
    text: str
    attachments: list[Attachment] = []
