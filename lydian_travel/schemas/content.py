from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field as PydanticField

ContentTypeLiteral = Literal["hotel", "car", "tour", "transfer", "vehicle", "property"]
ToneLiteral = Literal["professional", "casual", "luxury", "family-friendly"]


class ContentRequest(BaseModel):
    type: ContentTypeLiteral
    name: str = PydanticField(..., min_length=1, max_length=200)
    location: str = PydanticField(..., min_length=1, max_length=200)
    category: Optional[str] = PydanticField(None, max_length=100)
    features: List[str] = PydanticField(default_factory=list)
    price: Optional[float] = PydanticField(None, ge=0)
    rating: Optional[float] = PydanticField(None, ge=0, le=5)
    additional_info: Dict[str, Any] = PydanticField(default_factory=dict)


class FAQItem(BaseModel):
    question: str
    answer: str


class GeneratedContent(BaseModel):
    title: str
    short_description: str
    long_description: str
    highlights: List[str]
    seo_title: str
    meta_description: str
    keywords: List[str]
    faq: List[FAQItem]
    tags: List[str]
    call_to_action: str
    tone: ToneLiteral


class ContentBatchRequest(BaseModel):
    items: List[ContentRequest] = PydanticField(..., min_length=1, max_length=100)


class ContentQuality(BaseModel):
    score: int
    feedback: List[str]
