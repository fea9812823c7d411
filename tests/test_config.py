"""Tests for environment-backed settings."""

import os
import subprocess
import sys
from pathlib import Path

import pytest

from fixcity.config import Settings

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def _settings_in_clean_env(expr: str) -> str:
    """Evaluate ``expr`` against a fresh ``Settings()`` with APP_ENV unset."""
    env = {k: v for k, v in os.environ.items() if k != "APP_ENV"}
    code = f"from fixcity.config import Settings; s = Settings(); print({expr})"
    result = subprocess.run(
        [sys.executable, "-c", code],
        cwd=PROJECT_ROOT,
        env=env,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


class TestAppEnv:
    """Tests for the APP_ENV default."""

    def test_defaults_to_production(self):
        """Without APP_ENV the app runs in production mode."""
        assert _settings_in_clean_env("s.APP_ENV, s.is_production") == "('production', True)"

    def test_reset_token_not_echoed_by_default(self, tmp_path):
        """The forgot-password route echoes no reset token unless development is chosen."""
        env = {k: v for k, v in os.environ.items() if k != "APP_ENV"}
        env["DATABASE_URL"] = f"sqlite:///{tmp_path / 'fixcity.db'}"
        code = (
            "from fastapi.testclient import TestClient\n"
            "from fixcity.database import init_db\n"
            "from fixcity.rate_limit import limiter\n"
            "from main import app\n"
            "limiter.enabled = False\n"
            "init_db()\n"
            "with TestClient(app) as client:\n"
            "    client.post('/api/auth/register', json={'name': 'Ana', 'email': 'ana@x.com',"
            " 'phone': '+15551234567', 'password': 'Passw0rd!'})\n"
            "    body = client.post('/api/auth/forgot-password', json={'email': 'ana@x.com'}).json()\n"
            "print('resetToken' in body, body['success'])\n"
        )
        result = subprocess.run(
            [sys.executable, "-c", code],
            cwd=PROJECT_ROOT,
            env=env,
            capture_output=True,
            text=True,
            check=True,
        )
        assert result.stdout.strip().splitlines()[-1] == "False True"


class TestOverrides:
    """Tests for keyword overrides."""

    def test_override(self):
        assert Settings(APP_ENV="development").is_production is False

    def test_unknown_setting(self):
        with pytest.raises(AttributeError):
            Settings(NOT_A_SETTING=1)
