"""
Test settings loading.

Verifies that every key documented in .env.example maps onto exactly one
settings field and that values from the environment reach the sections.
"""
from __future__ import annotations

from pathlib import Path
import re

import pytest

# 1) Import api.dependencies so dotenv loads exactly once (canonical location).
import api.dependencies  # noqa: F401

from core.settings import get_app_settings


def _parse_env_keys(env_path: Path) -> list[str]:
    text = env_path.read_text(encoding="utf-8", errors="replace")
    keys: list[str] = []
    for line in text.splitlines():
        s = line.strip()
        if not s or s.startswith("#"):
            continue
        if s.startswith("export "):
            s = s[len("export ") :].strip()
        if "=" not in s:
            continue
        k, _ = s.split("=", 1)
        k = k.strip()
        if not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", k):
            continue
        keys.append(k)
    # de-duplicate while preserving order
    return list(dict.fromkeys(keys))


def _collect_env_map(model) -> dict[str, str]:
    """
    Return map: ENV_NAME -> field_name for a settings model.

    Aliased fields use the alias; the rest use env_prefix + field name.
    """
    prefix = (type(model).model_config.get("env_prefix") or "").upper()
    env_map: dict[str, str] = {}
    for field_name, field in type(model).model_fields.items():
        env_map[field.alias or f"{prefix}{field_name.upper()}"] = field_name
    return env_map


@pytest.fixture
def fresh_settings():
    get_app_settings.cache_clear()
    yield get_app_settings
    get_app_settings.cache_clear()


def test_every_documented_env_key_is_mapped(fresh_settings):
    repo_root = Path(__file__).resolve().parents[1]
    keys = _parse_env_keys(repo_root / ".env.example")

    settings = fresh_settings()
    modules = {
        "paystack": settings.paystack,
        "supabase": settings.supabase,
        "frontend": settings.frontend,
        "database": settings.database,
    }

    env_to_locator: dict[str, tuple[str, str]] = {}
    for module_name, model in modules.items():
        for env_name, field_name in _collect_env_map(model).items():
            if env_name in env_to_locator:
                pytest.fail(f"Duplicate env name mapped twice: {env_name}")
            env_to_locator[env_name] = (module_name, field_name)

    missing = [k for k in keys if k not in env_to_locator]
    assert not missing, f"Unmapped env keys: {missing}"


def test_environment_values_reach_sections(fresh_settings, monkeypatch):
    monkeypatch.setenv("PAYSTACK_SECRET_KEY", "sk_test_env")
    monkeypatch.setenv("PAYSTACK_CHANNELS", "card, mobile_money")
    monkeypatch.setenv("PAYSTACK_TIMEOUT_SECONDS", "5")
    monkeypatch.setenv("FRONTEND_URL", "https://shop.example.com/")
    monkeypatch.setenv("DB_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

    settings = fresh_settings()

    assert settings.paystack.secret_key == "sk_test_env"
    assert settings.paystack.channel_list == ["card", "mobile_money"]
    assert settings.paystack.timeout_seconds == 5.0
    assert settings.frontend.confirmation_url.startswith("https://shop.example.com/checkout/")
    assert settings.database.is_sqlite


def test_settings_are_cached(fresh_settings):
    assert fresh_settings() is fresh_settings()
