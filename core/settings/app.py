# core/settings/app.py
from functools import lru_cache

# Sections
from core.settings.sections.paystack import PaystackSettings
from core.settings.sections.supabase import SupabaseSettings
from core.settings.sections.frontend import FrontendSettings
from core.infrastructure.database.config import DatabaseSettings


class AppSettings:
    """
    Central application settings aggregator.
    Settings are loaded lazily inside __init__
    to prevent eager evaluation at import time.
    """

    def __init__(self):
        # Load each settings class ONLY when AppSettings is instantiated
        self.paystack = PaystackSettings()
        self.supabase = SupabaseSettings()
        self.frontend = FrontendSettings()
        self.database = DatabaseSettings()


@lru_cache()
def get_app_settings() -> AppSettings:
    """Return cached global settings for the entire app."""
    return AppSettings()
