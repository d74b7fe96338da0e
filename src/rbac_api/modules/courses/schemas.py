"""Response schemas for the sample course endpoints."""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Plain acknowledgement returned by the sample endpoints."""

    message: str
