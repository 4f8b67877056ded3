from pydantic import Field
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    app_name: str = Field(default="Doc-Librarian")
    environment: str = Field(default="dev")
    log_level: str = Field(default="INFO")
    allowed_origins: List[str] = Field(default_factory=list, description="CORS allowed origins")
    # Flat JSON record store
    data_path: str = Field(default="data/data.json")
    # Upload storage; falls back to <tmpdir>/uploads when not writable
    uploads_dir: str = Field(default="public/uploads")
    uploads_url_prefix: str = Field(default="/uploads")
    preview_max_bytes: int = Field(default=512 * 1024)
    preview_max_chars: int = Field(default=4000)
    # Retrieval
    max_tags: int = Field(default=10)
    default_top_k: int = Field(default=10)
    tokenizer: str = Field(default="simple")
    # Proposal backend: auto|openai|static (static = placeholder proposal, no network)
    proposer_backend: str = Field(default="auto")
    openai_api_key: str | None = None
    openai_model: str = Field(default="gpt-4o-mini")
    openai_temperature: float = Field(default=0.3)

    class Config:
        env_file = ".env"


settings = Settings()
