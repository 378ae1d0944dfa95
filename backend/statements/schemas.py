import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class SendStatementSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    # a client-rendered PDF; rendered server-side when absent
    pdf_base64: Optional[str] = Field(None, alias="pdfBase64")
    period: str = "month"
    start: Optional[dt.date] = Field(None, alias="from")
    end: Optional[dt.date] = Field(None, alias="to")
