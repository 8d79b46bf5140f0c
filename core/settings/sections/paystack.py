from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


DEFAULT_CHANNELS = "card,bank,ussd,qr,mobile_money,bank_transfer"


class PaystackSettings(BaseSettings):
    """
    Paystack gateway settings.
    Loaded from .env file with exact variable name matching.
    """

    secret_key: str = Field(default="", alias="PAYSTACK_SECRET_KEY")
    base_url: str = Field(default="https://api.paystack.co", alias="PAYSTACK_BASE_URL")
    currency: str = Field(default="KES", alias="PAYSTACK_CURRENCY")
    callback_url: Optional[str] = Field(default=None, alias="PAYSTACK_CALLBACK_URL")
    timeout_seconds: float = Field(default=15.0, gt=0, alias="PAYSTACK_TIMEOUT_SECONDS")
    channels: str = Field(default=DEFAULT_CHANNELS, alias="PAYSTACK_CHANNELS")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @property
    def channel_list(self) -> List[str]:
        """Comma-separated channels as a list."""
        return [c.strip() for c in self.channels.split(",") if c.strip()]
