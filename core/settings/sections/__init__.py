"""Settings sections, one per external concern."""
from core.settings.sections.paystack import PaystackSettings
from core.settings.sections.supabase import SupabaseSettings
from core.settings.sections.frontend import FrontendSettings

__all__ = ["PaystackSettings", "SupabaseSettings", "FrontendSettings"]
