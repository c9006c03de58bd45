"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class PaymentSystemConfig(BaseSettings):
    """Payment system ledger configuration"""
    
    model_config = SettingsConfigDict(
        env_prefix="PAYSYS_",
        env_file=".env",
        case_sensitive=False
    )
    
    # Reserved accounts
    emission_account: str = "BY00EMIS00000000000000000000"
    destruction_account: str = "BY99DEST00000000000000000000"
    
    # Number of minor-unit decimal places kept on every balance
    amount_precision: int = 2
    
    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    
    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8090
    api_title: str = "Payment System API"


# Global configuration instance
config = PaymentSystemConfig()


def get_config() -> PaymentSystemConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> PaymentSystemConfig:
    """Reload configuration from environment"""
    global config
    config = PaymentSystemConfig()
    return config
