"""Workshop chat assistant models."""
from typing import List, Literal
from pydantic import BaseModel, Field
from .enums import GenerationMode


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str = Field(..., min_length=1)


class ChatRequest(BaseModel):
    """A question plus prior turns of the conversation."""
    message: str = Field(..., min_length=1, max_length=4000)
    history: List[ChatMessage] = Field(default_factory=list, max_length=20)


class ChatResponse(BaseModel):
    reply: str
    mode: GenerationMode
