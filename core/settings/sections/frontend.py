from pydantic import Field
from pydantic_settings import BaseSettings


class FrontendSettings(BaseSettings):
    """
    Storefront URLs used for the gateway return redirect.
    """

    url: str = Field(default="http://localhost:3000", alias="FRONTEND_URL")
    confirmation_path: str = Field(
        default="/checkout/payment-confirmation",
        alias="FRONTEND_CONFIRMATION_PATH",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @property
    def confirmation_url(self) -> str:
        return self.url.rstrip("/") + "/" + self.confirmation_path.lstrip("/")
