"""Core package: domain, application, infrastructure, settings."""
