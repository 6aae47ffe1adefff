# ruff: noqa: INP001
"""Pytest configuration shared across tests."""

import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings are validated at import time; pin deterministic values regardless
# of the shell environment.
os.environ["SERVICE_API_TOKEN"] = "test-service-token-0123456789-0123456789-abcdef"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "test"
os.environ["DB_AUTO_MIGRATE"] = "false"
os.environ.pop("ESCALATION_STATUS_ON_ESCALATE", None)
