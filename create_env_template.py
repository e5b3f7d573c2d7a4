#!/usr/bin/env python3
"""
Create environment template for deployment.
Helps users point the service at their ITURHFProp installation.
"""

import os
import sys
from pathlib import Path

ENV_TEMPLATE = """# ========================================
# ITURHFProp Prediction Service Environment
# ========================================

# REQUIRED: ITURHFProp binary
ITURHFPROP_PATH=/opt/iturhfprop/ITURHFProp

# REQUIRED: ITURHFProp install root (must contain Data/ with ionos12.bin)
ITURHFPROP_DATA=/opt/iturhfprop

# OPTIONAL: Directory holding libp533.so / libp372.so
# Defaults to the binary's directory
# ITURHFPROP_LIB_DIR=/opt/iturhfprop

# OPTIONAL: Scratch directory for per-run input/output files
ITURHFPROP_TEMP_DIR=/tmp/iturhfprop

# OPTIONAL: Directory the engine writes its own reports into
ITURHFPROP_REPORT_DIR=/tmp/

# ========================================
# Engine limits
# ========================================

# Seconds before a single engine run is killed
ENGINE_TIMEOUT=30

# Parallel engine runs for 24-hour predictions
HOURLY_MAX_WORKERS=4

# Seconds to wait for a whole 24-hour batch
HOURLY_TIMEOUT=300

# ========================================
# Flask Configuration
# ========================================

# Environment (development/production)
FLASK_ENV=production

# Secret key for Flask sessions
# Generate a secure key: python -c "import secrets; print(secrets.token_hex(32))"
SECRET_KEY=dev-secret-key-change-in-production

# Port for the application
PORT=3000

# Seconds to keep successful predictions cached
CACHE_DEFAULT_TIMEOUT=600

# OPTIONAL: Logging
# LOG_LEVEL=INFO
# LOG_FILE=logs/iturhfprop_service.log
"""

REQUIRED_VARS = ['ITURHFPROP_PATH', 'ITURHFPROP_DATA']


def create_env_template(env_file: Path = Path('.env'), force: bool = False) -> bool:
    """Create a .env file template with all supported variables."""
    if env_file.exists() and not force:
        print("📝 .env file already exists")
        response = input("Do you want to overwrite it? (y/N): ")
        if response.lower() != 'y':
            print("Skipping .env file creation")
            return False

    try:
        env_file.write_text(ENV_TEMPLATE)
        print("✅ Created .env file template")
        print("\n📋 Next steps:")
        print("1. Edit the .env file with your ITURHFProp paths")
        print("2. Run: python wsgi.py")
        print("3. Check http://localhost:3000/api/health")
        return True
    except OSError as e:
        print(f"❌ Failed to create .env file: {e}")
        return False


def validate_env_file(env_file: Path = Path('.env')) -> bool:
    """Validate the current .env file."""
    if not env_file.exists():
        print("❌ .env file not found")
        return False

    values = {}
    for line in env_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        key, value = line.split('=', 1)
        values[key.strip()] = value.strip()

    print("🔍 Validating .env file...")

    missing = [var for var in REQUIRED_VARS if not values.get(var)]
    if missing:
        print(f"❌ Missing required variables: {', '.join(missing)}")
        return False

    valid = True
    binary = values['ITURHFPROP_PATH']
    if not os.path.isfile(binary):
        print(f"⚠️  ITURHFPROP_PATH does not exist on this machine: {binary}")
        valid = False

    data_dir = os.path.join(values['ITURHFPROP_DATA'], 'Data')
    if not os.path.isdir(data_dir):
        print(f"⚠️  No Data/ directory under ITURHFPROP_DATA: {data_dir}")
        valid = False

    if valid:
        print("✅ .env file validation passed")
    return valid


def main():
    """Main function."""
    print("🔧 Environment Setup Helper")
    print("=" * 40)

    if len(sys.argv) > 1 and sys.argv[1] == 'validate':
        validate_env_file()
    else:
        create_env_template()
        print("\n" + "=" * 40)
        validate_env_file()


if __name__ == '__main__':
    main()
