"""Supabase auth adapter."""
from .identity_provider import SupabaseIdentityProvider

__all__ = ["SupabaseIdentityProvider"]
