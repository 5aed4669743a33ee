"""
Client-side configuration, read from the environment like the API's Settings.
Timeouts are in seconds; exceeding one counts as a network failure.
"""
import os
from pydantic import BaseModel, Field

class ClientSettings(BaseModel):
    API_URL: str = Field(default_factory=lambda: os.getenv("WELLNESS_API_URL", "http://localhost:4000/api"))
    QUEUE_DIR: str = Field(default_factory=lambda: os.getenv("WELLNESS_QUEUE_DIR", os.path.expanduser("~/.wellness")))
    WRITE_TIMEOUT: float = Field(default_factory=lambda: float(os.getenv("WELLNESS_WRITE_TIMEOUT", "10")))
    READ_TIMEOUT: float = Field(default_factory=lambda: float(os.getenv("WELLNESS_READ_TIMEOUT", "5")))
