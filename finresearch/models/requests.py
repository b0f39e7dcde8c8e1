"""
API Request Models - Pydantic models for request validation.
"""

from typing import List
from pydantic import BaseModel, Field, field_validator

from finresearch.models.schemas import Message


class ChatRequest(BaseModel):
    """
    Request to run the research agent on a query.

    Example:
        {
            "query": "What was Acme's revenue over the last 4 quarters?",
            "message_history": [
                {"role": "user", "content": "Hi"},
                {"role": "assistant", "content": "Hello! Ask me about a company."}
            ]
        }
    """
    query: str = Field(
        ...,
        min_length=1,
        max_length=4000,
        description="Natural-language research question",
        examples=["What was Acme's revenue over the last 4 quarters?"]
    )
    message_history: List[Message] = Field(
        default_factory=list,
        description="Prior conversation turns, oldest first"
    )

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        """Reject whitespace-only queries."""
        v = v.strip()
        if not v:
            raise ValueError("Query must not be empty")
        return v
