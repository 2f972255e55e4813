#!/usr/bin/env python3
"""
Generate the JWT signing key for portal sessions and store it in .env.

Usage: generate_secret_key.py [ENV_FILE]   (defaults to ./.env)

An existing JWT_SECRET_KEY line is replaced; other settings are left as they
are. Rotating the key invalidates every issued session cookie.
"""

import secrets
import sys
from pathlib import Path

from dotenv import dotenv_values, set_key

from medvend.config import SESSION_COOKIE_NAME, TOKEN_EXPIRY_HOURS

SECRET_ENV_VAR = "JWT_SECRET_KEY"


def generate_secret_key(nbytes: int = 32) -> str:
    return secrets.token_hex(nbytes)


def write_secret_key(env_path=".env", key=None) -> str:
    """Write *key* (or a fresh one) to *env_path* and return it."""
    key = key or generate_secret_key()
    path = Path(env_path)
    rotated = path.exists() and SECRET_ENV_VAR in dotenv_values(path)
    path.touch(exist_ok=True)
    set_key(str(path), SECRET_ENV_VAR, key)
    action = "Rotated" if rotated else "Added"
    print(f"[init] {action} {SECRET_ENV_VAR} in {path}")
    return key


if __name__ == "__main__":
    env_file = sys.argv[1] if len(sys.argv) > 1 else ".env"

    print("=" * 60)
    print("MedVend Session Secret Generator")
    print("=" * 60)

    write_secret_key(env_file)

    print(f"\nSessions use the '{SESSION_COOKIE_NAME}' cookie and expire after "
          f"{TOKEN_EXPIRY_HOURS}h of inactivity.")
    print("Restart the server to pick up the new key; existing sessions end.")
    print("=" * 60)
