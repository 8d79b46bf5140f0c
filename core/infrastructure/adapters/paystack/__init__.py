"""Paystack gateway adapter."""
from .client import PaystackClient, map_transaction_status

__all__ = ["PaystackClient", "map_transaction_status"]
