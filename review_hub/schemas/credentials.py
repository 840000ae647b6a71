from datetime import datetime

from pydantic import BaseModel


class Credential(BaseModel):
    client_id: str
    token: str
    expires_at: datetime


class TokenStatus(BaseModel):
    client_id: str
    expires_at: datetime
    is_valid: bool


class TokenStats(BaseModel):
    total_tokens: int
    tokens: list[TokenStatus]
