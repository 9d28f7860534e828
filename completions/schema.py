"""Wire shape of the completion request body."""
from pydantic import BaseModel, Field
from typing import Dict, List, Optional


class CompletionPayload(BaseModel):
    """JSON body of a completion call.

    ``stop`` and ``logit_bias`` are left out of the dump when empty.
    """

    model: str
    prompt: str
    stop: Optional[List[str]] = None
    max_tokens: int
    completions: int = Field(serialization_alias="n")
    temperature: float
    top_p: float
    logprobs: int
    echo: bool
    best_of: int
    frequency_penalty: float
    presence_penalty: float
    logit_bias: Optional[Dict[str, int]] = None
    user: str
    stream: bool

    def to_wire(self) -> dict:
        data = self.model_dump(by_alias=True)
        if not data.get("stop"):
            data.pop("stop", None)
        if not data.get("logit_bias"):
            data.pop("logit_bias", None)
        return data
