"""
Configuration for the configuration store client.

Uses pydantic-settings for environment variable loading.
"""

from pydantic import Field
from pydantic_settings import BaseSettings

from .models import CollectionName


class Settings(BaseSettings):
    """Store configuration loaded from environment."""

    # Remote configuration service; empty means in-memory backend
    api_base_url: str = Field(default="", description="Configuration service base URL")
    api_token: str = Field(default="", description="Bearer token for the configuration service")
    request_timeout: float = Field(default=30.0, description="HTTP timeout seconds")

    # Workspace scope (also the project id embedded in generated key tokens)
    workspace_id: str = Field(default="default", description="Workspace/project ID")

    # Key generation
    token_length: int = Field(default=24, description="Random part length of generated key tokens")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", description="Log format (text, json)")

    model_config = {"env_prefix": "CONFIGSTORE_"}

    def objects_path(self, collection: CollectionName) -> str:
        """Path of a collection in the objects API."""
        return f"/api/v2/objects/{self.workspace_id}/{collection.value}"
