from pydantic_settings import BaseSettings
from pathlib import Path

# Get the project root directory (parent of admitplan folder)
PROJECT_ROOT = Path(__file__).parent.parent

class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""
    database_url: str = "sqlite:///" + str(PROJECT_ROOT / "admitplan.db")

    # Wall clock and user-facing language
    timezone: str = "Asia/Seoul"
    locale: str = "ko"  # "ko" or "en"
    log_level: str = "INFO"

    # Event log paging
    default_page_size: int = 20
    max_page_size: int = 100
    timeline_event_limit: int = 50

    # AI Provider Configuration
    ai_provider: str = "ollama"  # "ollama" or "claude"

    # Ollama settings (for local development)
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "llama3.2:latest"

    # Claude API settings (for production)
    claude_api_key: str = ""
    claude_model: str = "claude-3-5-sonnet-20241022"

    class Config:
        env_file = str(PROJECT_ROOT / ".env")

settings = Settings()
