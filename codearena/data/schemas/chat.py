from typing import List, Literal

from pydantic import BaseModel, Field

from codearena.data.schemas.problem import StartCode, VisibleTestCase


class ChatPart(BaseModel):
    text: str


class ChatMessage(BaseModel):
    role: Literal["user", "model"]
    parts: List[ChatPart] = Field(..., min_length=1)


class ChatRequest(BaseModel):
    messages: List[ChatMessage]
    title: str = ""
    description: str = ""
    test_cases: List[VisibleTestCase] = []
    start_code: List[StartCode] = []


class ChatResponse(BaseModel):
    message: str
