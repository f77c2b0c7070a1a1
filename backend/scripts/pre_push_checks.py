#!/usr/bin/env python3
"""
Pre-push / production readiness checks.
Run from backend dir with project venv active: python scripts/pre_push_checks.py
Prints a local Bearer token for a throwaway owner so the API can be tried from /docs.
"""
import sys
import uuid
from pathlib import Path

BACKEND = Path(__file__).resolve().parent.parent
if str(BACKEND) not in sys.path:
    sys.path.insert(0, str(BACKEND))


def check_imports():
    from app.main import app  # noqa: F401
    from app.llm import get_topic_generator  # noqa: F401
    from app.services.rate_limit import window_start_for  # noqa: F401
    return "imports"


def check_settings():
    from app.config import settings
    assert settings.generation_min_topics <= settings.generation_max_topics
    assert settings.ai_rate_limit_per_hour > 0 and settings.ai_rate_limit_window_seconds > 0
    if settings.env.strip().lower() == "production":
        assert settings.secret_key != "change-me-in-production", "SECRET_KEY must be set in production"
    return "settings"


def check_init_db():
    from app.database import init_sqlite_db
    init_sqlite_db()
    return "init_sqlite_db"


def check_generator():
    from app.llm import get_topic_generator
    gen = get_topic_generator()
    return f"generator ({gen.name})"


def check_token():
    from app.services.auth import create_access_token, owner_id_from_token
    owner = uuid.uuid4()
    token = create_access_token(owner)
    assert owner_id_from_token(token) == owner
    print(f"Dev token (owner {owner}): {token}")
    return "token"


def main():
    checks = [check_imports, check_settings, check_init_db, check_generator, check_token]
    for fn in checks:
        try:
            name = fn()
            print(f"OK {name}")
        except Exception as e:
            print(f"FAIL {fn.__name__}: {e}")
            return 1
    print("All pre-push checks passed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
