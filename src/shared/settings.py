"""Application settings read from the environment via pydantic-settings.

Every value can be overridden with a ``FURNISHOP_``-prefixed environment
variable or a ``.env`` file in the working directory. Protean's own
infrastructure config (databases, brokers, event store) stays in each
domain's ``domain.toml`` and is selected by ``PROTEAN_ENV``.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FURNISHOP_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Orders / inventory reservation
    reservation_hours: int = 24
    reservation_sweep_cron: str = "*/15 * * * *"
    scheduler_enabled: bool = True
    chat_room_retention_days: int = 30

    # MoMo e-wallet
    momo_partner_code: str = "MOMO"
    momo_access_key: str = ""
    momo_secret_key: str = ""
    momo_endpoint: str = "https://test-payment.momo.vn/v2/gateway/api/create"
    momo_redirect_url: str = "http://localhost:5173/momo-callback"
    momo_ipn_url: str = "http://localhost:8000/momo/webhook"
    momo_timeout_seconds: int = 30
    payment_gateway: str = "fake"  # "fake" or "momo"

    # Auth
    jwt_secret_key: str = "change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7
    password_reset_minutes: int = 15
    frontend_url: str = "http://localhost:5173"

    # Mail
    mail_backend: str = "fake"  # "fake" or "smtp"
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    mail_sender: str = "noreply@furnishop.local"
    shop_admin_email: str = "admin@furnishop.local"

    # Chat bot
    bot_enabled: bool = True
    bot_name: str = "🤖 Bot Tư Vấn"
    bot_delay_min_seconds: float = 1.0
    bot_delay_max_seconds: float = 2.0
    shop_hotlines: list[str] = ["0941 038 839", "0965 708 839"]
    shop_email: str = "noithatdaidungphat@gmail.com"
    shop_address: str = "474 ĐT824, Mỹ Hạnh Nam, Đức Hòa, Long An"
    shop_zalo: str = "0965708839"

    # Translation pipeline
    translator_backend: str = "google"  # "google" or "fake"
    translation_delay_seconds: float = 1.5

    # API
    cors_origins: list[str] = ["*"]


@lru_cache
def get_settings() -> Settings:
    return Settings()
