"""Application configuration using pydantic-settings."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Dict, List, Literal, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )
    
    # Database
    database_url: str = "sqlite:///./data/luxestays.db"
    
    # Payment status provider
    payment_provider: Literal["mock", "gateway"] = "mock"
    payment_gateway_url: Optional[str] = None
    payment_gateway_api_key: Optional[str] = None
    payment_gateway_timeout_seconds: int = 15
    
    # Mock provider reports success on this check attempt (1-based)
    mock_payment_success_after: int = 2
    
    # UPI payee
    upi_payee_vpa: str = "luxestays@upi"
    upi_payee_name: str = "LuxeStays"
    currency: str = "INR"
    
    # CEO identities with full admin access
    operator_ids: List[str] = ["ceo"]
    
    # Resort owner identity -> the one resort they manage
    resort_owner_ids: Dict[str, str] = {}
    
    # Logging
    log_level: str = "INFO"
    
    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000


settings = Settings()
