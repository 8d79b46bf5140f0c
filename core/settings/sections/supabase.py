from pydantic import Field
from pydantic_settings import BaseSettings


class SupabaseSettings(BaseSettings):
    """
    Supabase auth settings, used to resolve bearer tokens.
    Loaded from .env file with exact variable name matching.
    """

    url: str = Field(default="", alias="SUPABASE_URL")
    anon_key: str = Field(default="", alias="SUPABASE_ANON_KEY")
    timeout_seconds: float = Field(default=10.0, gt=0, alias="SUPABASE_TIMEOUT_SECONDS")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }
