"""HTTP API for the order payment service."""

SERVICE_NAME = "order-payments"
__version__ = "1.0.0"
