"""
Configuration Management Module

Centralized configuration using pydantic-settings. Every field can be set
through a WALLET_-prefixed environment variable or a .env file.
"""

from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class WalletConfig(BaseSettings):
    """Wallet core configuration"""

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stdout

    # Credential rules
    login_pattern: str = r"^[a-zA-Z0-9]+$"
    password_min_length: int = 6

    # Ledger rules
    default_tokens: List[str] = ["USD", "BTC"]
    strict_token_check: bool = False  # True: any existing key blocks add_token, even at zero
    missing_token_as_zero: bool = True  # False: an absent sender token skips the balance check
    gate_receiver_balance: bool = True  # transfer_with_history also checks the receiver

    # Feature flags
    enable_audit_logging: bool = True

    model_config = SettingsConfigDict(
        env_prefix="WALLET_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global configuration instance
config = WalletConfig()


def get_config() -> WalletConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> WalletConfig:
    """Reload configuration from environment"""
    global config
    config = WalletConfig()
    return config
