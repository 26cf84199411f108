from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class GatewayRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = None


class BookSelectionRequest(GatewayRequest):
    review_type: Optional[str] = Field(default=None, alias="reviewType")
    book_title: Optional[str] = Field(default=None, alias="bookTitle")
    conversation_id: Optional[str] = None


class BookSummaryRequest(GatewayRequest):
    book_title: Optional[str] = Field(default=None, alias="bookTitle")
    conversation_id: Optional[str] = None


class ChatTurn(BaseModel):
    role: str
    content: str = ""


class PlotSummaryRequest(GatewayRequest):
    conversation_history: List[ChatTurn] = Field(default_factory=list)
    conversation_id: Optional[str] = None


class StructureExamplesRequest(GatewayRequest):
    structure_type: Optional[str] = None
    generate_all: bool = False
    character: Optional[Dict[str, Any]] = None
    plot: Optional[Dict[str, Any]] = None


class BookCoverRequest(GatewayRequest):
    book_title: Optional[str] = Field(default=None, alias="bookTitle")


class LetterReaderRequest(GatewayRequest):
    recipient: Optional[str] = None
    occasion: Optional[str] = None


class BookReviewPrepareRequest(GatewayRequest):
    book_title: Optional[str] = Field(default=None, alias="bookTitle")
    review_type: str = Field(default="recommendation", alias="reviewType")


class BookReviewPublishRequest(GatewayRequest):
    review_type: Optional[str] = Field(default=None, alias="reviewType")
    book_title: Optional[str] = Field(default=None, alias="bookTitle")
    book_cover_url: Optional[str] = Field(default=None, alias="bookCoverUrl")
    outline: List[str] = Field(default_factory=list)
    sections: Dict[int, str] = Field(default_factory=dict)
