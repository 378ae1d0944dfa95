from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CopilotRequestSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: Optional[str] = None
    # a transcript to summarise; switches the copilot to summary mode
    context: Optional[str] = None
    user_id: Optional[str] = Field(None, alias="userId")

    @field_validator("user_id", mode="before")
    @classmethod
    def _stringify_user_id(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v
