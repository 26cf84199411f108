from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ApiCall(BaseModel):
    """One outbound provider call captured during a stage."""

    endpoint: str
    request: Any = None
    response: Any = None


class NewInteraction(BaseModel):
    """
    A partial interaction as submitted by a stage; the store assigns the timestamp.

    Only user_id and stage are checked. Everything else is kept exactly as the
    stage sent it, so the text fields and api_calls may hold any JSON value.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: str
    stage: str
    input: Any = Field(default_factory=dict)
    output: Any = Field(default_factory=dict)
    api_calls: Any = Field(default_factory=list)
    story: Any = None
    review: Any = None
    review_type: Any = Field(default=None, alias="reviewType")
    book_title: Any = Field(default=None, alias="bookTitle")
    book_cover_url: Any = Field(default=None, alias="bookCoverUrl")
    letter: Any = None
    recipient: Any = None
    occasion: Any = None

    @field_validator("input", "output", mode="before")
    @classmethod
    def _empty_payload(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("api_calls", mode="before")
    @classmethod
    def _empty_calls(cls, value: Any) -> Any:
        return [] if value is None else value


class Interaction(NewInteraction):
    timestamp: int  # milliseconds since the epoch

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @property
    def messages(self) -> Optional[list]:
        if not isinstance(self.input, dict):
            return None
        messages = self.input.get("messages")
        return messages if isinstance(messages, list) else None

    @property
    def api_call_count(self) -> int:
        return len(self.api_calls) if isinstance(self.api_calls, list) else 0
