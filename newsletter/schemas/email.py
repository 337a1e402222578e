"""Email API schemas."""

from pydantic import BaseModel, Field


class SendEmailRequest(BaseModel):
    """JSON body accepted by the email API."""

    sender: str = Field(serialization_alias="From")
    recipient: str = Field(serialization_alias="To")
    subject: str = Field(serialization_alias="Subject")
    html_body: str = Field(serialization_alias="HtmlBody")
    text_body: str = Field(serialization_alias="TextBody")
