"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class PortalConfig(BaseSettings):
    """Bank portal configuration"""

    # Backend-as-a-service configuration
    backend: str = "memory"  # memory or http
    backend_url: str = ""  # e.g. https://<project>.supabase.co
    backend_anon_key: str = ""
    backend_timeout: float = 10.0

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8090

    # Security configuration
    auth_enabled: bool = True
    jwt_secret: str = "change-me-in-production"  # BaaS project JWT secret
    jwt_algorithm: str = "HS256"
    jwt_audience: Optional[str] = "authenticated"

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # Display configuration
    base_currency: str = "ZAR"
    default_location: str = "ZA"
    company_name: str = "Commerce Graduate Employment Program"
    company_address: str = "Durban, KwaZulu-Natal, South Africa"
    bank_name: str = "Lovable Bank Inc."  # letterhead of account confirmation letters
    bank_address: str = "123 Finance Street, Money City, 12345"

    # Business rules configuration
    statement_months: int = 3
    recent_transactions_limit: int = 5
    transfer_failure_rate: float = 0.3  # Demo only: share of beneficiary transfers that fail
    crypto_portfolio_value: str = "1250000000"  # Simulated crypto holdings in ZAR
    forecast_months: int = 12
    forecast_monthly_deposit: str = "1000000"  # Salary deposit assumed by the cashflow forecast

    # Block explorer configuration
    blockchain_info_url: str = "https://blockchain.info"  # tried first
    etherscan_url: str = "https://api.etherscan.io/api"
    etherscan_api_key: str = ""  # BANK_PORTAL_ETHERSCAN_API_KEY env var
    explorer_timeout: float = 5.0

    class Config:
        env_prefix = "BANK_PORTAL_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = PortalConfig()


def get_config() -> PortalConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> PortalConfig:
    """Reload configuration from environment"""
    global config
    config = PortalConfig()
    return config
