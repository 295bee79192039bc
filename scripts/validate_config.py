#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path
from typing import List, Optional

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from ticket_app.config.loader import ConfigLoader
from ticket_app.config.validation import ConfigValidator, ValidationError


def validate_account_config(loader: ConfigLoader, login_id: str) -> List[ValidationError]:
    """Validate configuration for a specific account."""
    config = loader.merge_config(login_id)
    return ConfigValidator.validate_config(config)


def main(config_dir: Optional[Path] = None) -> int:
    """Main validation function."""
    print("🔍 Validating account configuration...")

    loader = ConfigLoader.create(config_dir)
    if not loader.accounts_file.exists():
        print(f"❌ {loader.accounts_file} not found")
        return 1

    accounts = loader.list_accounts()
    if not accounts:
        print("❌ No accounts declared")
        return 1

    all_valid = True

    for login_id in accounts:
        print(f"\n👤 Validating {login_id}...")

        errors = validate_account_config(loader, login_id)
        if errors:
            print(f"❌ Found {len(errors)} validation errors:")
            for error in errors:
                print(f"  • {error.field}: {error.message} (value: {error.value})")
            all_valid = False
        else:
            print(f"✅ {login_id} configuration is valid")

    if all_valid:
        print("\n🎉 All configuration validation passed!")
        return 0

    print("\n❌ Configuration validation failed!")
    return 1


if __name__ == "__main__":
    sys.exit(main(Path(sys.argv[1]) if len(sys.argv) > 1 else None))
