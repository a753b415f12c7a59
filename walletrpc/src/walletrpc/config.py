"""
Configuration management using pydantic-settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="WALLETRPC_", env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )

    host: str = "127.0.0.1"
    port: int = 10332

    max_request_size: int = 1048576  # 1MB

    log_level: str = "INFO"

    # Comma-separated WIF keys; empty means no wallet is loaded
    wallet_keys: str = ""

    # Asset the network fee is paid in; empty = asset of the first output
    fee_asset: str = ""

    # Node JSON-RPC endpoint for relaying; empty = in-memory relay
    relay_url: str = ""
    relay_timeout: float = 30.0

    def get_wallet_keys(self) -> list[str]:
        if not self.wallet_keys:
            return []
        return [key.strip() for key in self.wallet_keys.split(",") if key.strip()]


def get_settings() -> Settings:
    return Settings()
