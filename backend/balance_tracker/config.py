"""Configuration management for the application."""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # API Configuration
    api_title: str = "Wallet Balance Tracker API"
    api_version: str = "1.0.0"
    api_prefix: str = "/api/v1"
    
    # CORS Configuration
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    
    # Target page. Class-name prefixes follow the profile page markup and
    # must be updated together when it changes.
    profile_url_template: str = "https://debank.com/profile/{address}"
    balance_selector: str = '[class^="HeaderInfo_totalAssetInner"]'
    percentage_selector: str = '[class^="HeaderInfo_changePercent"]'
    
    # Client identity presented to the target page
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/123.0.0.0 Safari/537.36"
    )
    accept_language: str = "en-US,en;q=0.9"
    locale: str = "en-US"
    
    # Browser Configuration
    headless: bool = True
    browser_args: list[str] = ["--no-sandbox", "--disable-setuid-sandbox"]
    browser_executable_path: Optional[str] = None  # None = bundled Chromium
    block_resources: bool = True
    blocked_resource_types: list[str] = ["image", "media", "font"]
    browser_check_url: str = "https://example.com"
    
    # Timing
    navigation_timeout_ms: int = 30000
    selector_timeout_ms: int = 15000
    balance_poll_interval_seconds: float = 0.5
    balance_poll_timeout_seconds: float = 30.0
    percentage_timeout_ms: int = 3000
    
    # Batch Limits
    max_addresses: int = 100
    batch_concurrency: int = 1  # 1 = one browser session at a time
    batch_ttl_seconds: int = 3600
    
    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
