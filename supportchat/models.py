from __future__ import annotations
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


Role = Literal["system", "user", "assistant"]


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(default_factory=list)


class FaqEntry(BaseModel):
    """
    One FAQ item. On the wire (resources.json) question/answer are "q"/"a".
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    question: str = Field(alias="q")
    answer: str = Field(alias="a")
    url: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    extra: Optional[str] = None

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class Brand(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None


class KnowledgeDocument(BaseModel):
    model_config = ConfigDict(extra="allow")

    brand: Optional[Brand] = None
    faq: List[FaqEntry] = Field(default_factory=list)
