#!/usr/bin/env python3
"""Helper script to check and create the .env file for Supabase configuration."""

from pathlib import Path
import os
import sys

TEMPLATE = """# Supabase Configuration (required)
# Get these from: https://supabase.com/dashboard -> Your Project -> Settings -> API
TERRITORY_SUPABASE_URL=https://your-project-id.supabase.co
TERRITORY_SUPABASE_KEY=your-service-role-key-here

# API Configuration
TERRITORY_API_PREFIX=/api
# TERRITORY_FRONTEND_ALLOWED_ORIGINS - leave commented to use defaults
# JSON array: ["http://localhost:5173"] or comma-separated: http://localhost:5173,http://127.0.0.1:5173

# Users table layout
TERRITORY_USERS_TABLE=users
TERRITORY_TERRITORY_COLUMN=admin_assigned_location
TERRITORY_ZIPCODE_CACHE_TTL_SECONDS=30
"""


def _mask(line: str) -> str:
    name, _, value = line.partition("=")
    value = value.strip()
    if name.strip() == "TERRITORY_SUPABASE_KEY" and len(value) > 20:
        return f"{name}={value[:20]}...{value[-10:]}"
    return line


def main():
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Supabase Environment Variables Checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        print(f"❌ .env file NOT found at: {env_file}")
        env_file.write_text(TEMPLATE, encoding="utf-8")
        print(f"✅ Created template .env file at: {env_file}")
        print("⚠️  Please edit .env and add your Supabase credentials!")
        return

    print(f"✅ Found .env file at: {env_file}")
    print("-" * 60)
    for line in env_file.read_text(encoding="utf-8").splitlines():
        print(_mask(line))
    print("-" * 60)
    print()

    for name in ("TERRITORY_SUPABASE_URL", "TERRITORY_SUPABASE_KEY"):
        value = os.getenv(name)
        if value:
            print(f"✅ {name} (from environment): {value[:20]}...")
        else:
            print(f"❌ {name} not found in environment")
    print()

    sys.path.insert(0, str(project_root / "src"))
    from territory_access.config import settings

    if settings.supabase_url and settings.supabase_key:
        print("✅ SUCCESS: Supabase is configured!")
    else:
        print("❌ ERROR: Supabase is NOT configured")
        print("Make sure variables start with the TERRITORY_ prefix and restart the backend after editing .env")


if __name__ == "__main__":
    main()
