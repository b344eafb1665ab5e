#!/usr/bin/env python3
"""Interactively generate the .env configuration file

Usage:
    python scripts/setup_env.py

Walks through every setting and writes a .env file at the project root.
"""
import os
import secrets

# Project root
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
ENV_FILE = os.path.join(PROJECT_ROOT, ".env")


# Settings: (env_key, description, default, required)
CONFIG_ITEMS = [
    # === Database ===
    ("DATABASE_URL", "Database URL", "sqlite:///data/events.db", False),

    # === Web API ===
    ("WEB_HOST", "Listen address", "0.0.0.0", False),
    ("WEB_PORT", "Listen port", "8080", False),
    ("WEB_USERNAME", "Login username", "admin", False),
    ("WEB_PASSWORD", "Login password", secrets.token_urlsafe(12), True),
    ("AUTH_ENABLED", "Require a login token (true/false)", "true", False),
    ("TOKEN_TTL_HOURS", "Token lifetime in hours", "24", False),

    # === Logging ===
    ("LOG_LEVEL", "Log level", "INFO", False),

    # === Organization defaults ===
    ("DEFAULT_TIMEZONE", "Default timezone", "Europe/Rome", False),
    ("DEFAULT_LANGUAGE", "Default language (it/en)", "it", False),
]

SECTION_NAMES = {
    "DATABASE": "# === Database ===",
    "WEB": "# === Web API ===",
    "AUTH": "# === Web API ===",
    "TOKEN": "# === Web API ===",
    "LOG": "# === Logging ===",
    "DEFAULT": "# === Organization defaults ===",
}


def build_env(values):
    """Render key/value pairs as .env text grouped by section."""
    env_lines = [
        "# Event management back end configuration",
        "# Generated by scripts/setup_env.py",
    ]
    current_header = None
    for key, value in values:
        header = SECTION_NAMES.get(key.split("_")[0], "# === Other ===")
        if header != current_header:
            current_header = header
            env_lines.append("")
            env_lines.append(header)
        env_lines.append(f"{key}={value}")
    return "\n".join(env_lines) + "\n"


def main():
    print()
    print("=" * 60)
    print("  Event management back end - setup")
    print("  Generates the .env configuration file")
    print("=" * 60)
    print()

    if os.path.exists(ENV_FILE):
        print(f"An .env file already exists: {ENV_FILE}")
        choice = input("Overwrite it? (y/N): ").strip().lower()
        if choice != "y":
            print("Cancelled.")
            return
        print()

    values = []
    for key, desc, default, required in CONFIG_ITEMS:
        req_tag = " [required]" if required else ""
        default_hint = f" (default: {default})" if default else ""
        print(f"{desc}{req_tag}")

        while True:
            value = input(f"  {key}={default_hint}: ").strip()
            if not value:
                value = default
            if required and not value:
                print(f"  {key} is required.")
                continue
            break

        values.append((key, value))
        print()

    with open(ENV_FILE, "w", encoding="utf-8") as f:
        f.write(build_env(values))

    print("=" * 60)
    print(f"  Configuration written to {ENV_FILE}")
    print()
    print("  Initialize the database:")
    print("    python scripts/init_db.py")
    print("  Start the API:")
    print("    python app.py")
    print("=" * 60)


if __name__ == "__main__":
    main()
