#!/usr/bin/env python3
"""
Bump version script for FnMaxima.

Updates the version number in both:
- pyproject.toml
- fnmaxima/__init__.py

Usage:
    python scripts/bump_version.py <new_version>

Example:
    python scripts/bump_version.py 0.1.1
"""

import argparse
import re
import sys
from pathlib import Path

VERSION_FILES = {
    Path("pyproject.toml"): r'^version\s*=\s*".*?"$',
    Path("fnmaxima/__init__.py"): r'^__version__\s*=\s*".*?"$',
}


def replace_version(path: Path, pattern: str, new_version: str) -> None:
    """Rewrite the first line matching pattern with new_version."""
    if not path.exists():
        print(f"Error: {path} not found")
        sys.exit(1)

    content = path.read_text()
    if not re.search(pattern, content, re.MULTILINE):
        print(f"Error: Could not find version pattern in {path}")
        sys.exit(1)

    prefix = "__version__" if path.suffix == ".py" else "version"
    updated = re.sub(
        pattern, f'{prefix} = "{new_version}"', content, count=1, flags=re.MULTILINE
    )
    path.write_text(updated)
    print(f"Updated version in {path} to {new_version}")


def validate_version_format(version: str) -> bool:
    """Validate version string format (x.y.z)"""
    return bool(re.match(r"^\d+\.\d+\.\d+$", version))


def main():
    parser = argparse.ArgumentParser(description="Bump version in FnMaxima project")
    parser.add_argument("version", help="New version number (format: x.y.z)")
    args = parser.parse_args()

    new_version = args.version

    if not validate_version_format(new_version):
        print(f"Error: Invalid version format '{new_version}'. Expected format: x.y.z")
        sys.exit(1)

    try:
        for path, pattern in VERSION_FILES.items():
            replace_version(path, pattern, new_version)
        print(f"\nVersion successfully bumped to {new_version}")
    except OSError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
