"""Pydantic payload models for the order-carrying collections.

Each collection is addressed by its endpoint segment (``timeline``,
``tech-skills``, ...). The models validate only the editable fields; the
store adds ``_id``, ``createdAt`` and ``updatedAt``.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field


class OrderedPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    order: int = 0


class TimelinePayload(OrderedPayload):
    year: str = Field(min_length=1)
    role: str = Field(min_length=1)
    company: str = Field(min_length=1)
    description: str = ""
    icon: str = "Briefcase"


class TechSkillPayload(OrderedPayload):
    name: str = Field(min_length=1)
    level: int = Field(default=0, ge=0, le=100)
    category: Optional[str] = None


class InterestPayload(OrderedPayload):
    icon: str = Field(min_length=1)
    label: str = Field(min_length=1)


class TechStackCategoryPayload(OrderedPayload):
    title: str = Field(min_length=1)
    icon: str = "general"
    skills: List[str] = Field(default_factory=list)


COLLECTION_MODELS: Dict[str, Type[OrderedPayload]] = {
    "timeline": TimelinePayload,
    "tech-skills": TechSkillPayload,
    "interests": InterestPayload,
    "tech-stack-categories": TechStackCategoryPayload,
}

# Server-managed keys never accepted from a request body
RESERVED_FIELDS = frozenset({"_id", "createdAt", "updatedAt"})


def model_for(collection: str) -> Optional[Type[OrderedPayload]]:
    return COLLECTION_MODELS.get(collection)


class LoginRequest(BaseModel):
    username: str
    password: str


class RepairResult(BaseModel):
    applied: List[str]
    failed: List[str]
    items: List[dict]


__all__ = [
    "OrderedPayload",
    "TimelinePayload",
    "TechSkillPayload",
    "InterestPayload",
    "TechStackCategoryPayload",
    "COLLECTION_MODELS",
    "RESERVED_FIELDS",
    "model_for",
    "LoginRequest",
    "RepairResult",
]
