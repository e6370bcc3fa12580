"""Pydantic schema for the username/password pair posted by both forms."""
from pydantic import BaseModel


class Credentials(BaseModel):
    username: str
    password: str
