#!/usr/bin/env python3
"""Notify Gateway — Application Runner.

Performs pre-flight checks and launches the web service.

Usage:
    python scripts/run.py
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

BANNER = r"""
╔══════════════════════════════════════════════════════════╗
║                                                          ║
║              Notify Gateway v1.0                         ║
║      Template email, workflow email and push relay       ║
║                                                          ║
╚══════════════════════════════════════════════════════════╝
"""

# Missing credentials only disable the matching channels
PROVIDER_ENV_VARS = {
    "RESEND_API_KEY": "direct template email (/api/email)",
    "NOVU_API_KEY": "workflow email and push (/api/notifications)",
}

REQUIRED_FILES = [
    "config/settings.yaml",
]


def _mask(value: str) -> str:
    return value[:6] + "..." + value[-4:] if len(value) > 10 else "***"


def preflight_checks() -> bool:
    """Run pre-flight checks before starting the service.

    Checks:
      - .env file exists (optional)
      - Provider API keys are set (warns only)
      - Required config files exist
      - logs/ directory exists (creates it)

    Returns:
        True if all blocking checks pass, False otherwise.
    """
    os.chdir(str(PROJECT_ROOT))
    ok = True

    env_path = PROJECT_ROOT / ".env"
    if not env_path.exists():
        print("⚠️  .env file not found, using the process environment")
        print("   Copy .env.example to .env and fill in your API keys.")
    else:
        from dotenv import load_dotenv
        load_dotenv(env_path)
        print("✅ .env loaded")

    dry_run = os.environ.get("NOTIFY_DRY_RUN", "").lower() in ("1", "true", "yes", "on")
    if dry_run:
        print("⚠️  NOTIFY_DRY_RUN is set: nothing will be delivered")

    for var, feature in PROVIDER_ENV_VARS.items():
        val = os.environ.get(var, "")
        if not val or val in ("your_key_here", "test"):
            print(f"⚠️  {var} not set ({feature} will answer 503)")
        else:
            print(f"✅ {var} = {_mask(val)}")

    for f in REQUIRED_FILES:
        path = PROJECT_ROOT / f
        if not path.exists():
            print(f"❌ {f} not found!")
            ok = False
        else:
            print(f"✅ {f} exists")

    (PROJECT_ROOT / "logs").mkdir(exist_ok=True)
    print("✅ logs/ directory ready")

    return ok


def main() -> None:
    """Entry point: run checks then start the service."""
    print(BANNER)

    print("═══ Pre-flight Checks ═══\n")
    if not preflight_checks():
        print("\n❌ Pre-flight checks failed! Fix the issues above and try again.")
        sys.exit(1)

    print("\n✅ All checks passed!\n")
    print("═══ Starting Notify Gateway ═══\n")

    from notify_gateway.main import main as app_main
    app_main()


if __name__ == "__main__":
    main()
