"""Setup verification for the brand website finder."""

import importlib
import json
import os
import sys
from typing import List, Optional

from rich.console import Console

from brandfinder.config import Settings, settings as default_settings
from brandfinder.console import console

REQUIRED_PACKAGES = ["httpx", "pydantic", "pydantic_settings", "rich"]
MIN_PYTHON = (3, 10)


def check_setup(settings: Optional[Settings] = None, out: Console = console) -> List[str]:
    """
    Print a setup checklist.

    Returns:
        Names of failed required checks (empty when ready to run)
    """
    settings = settings or default_settings
    failures: List[str] = []

    out.print("[bold]🔧 Knife Brand Website Finder - Setup Verification[/bold]\n")

    out.print("[bold]📋 SYSTEM CHECK[/bold]")
    version = ".".join(str(v) for v in sys.version_info[:3])
    out.print(f"Python version: {version}")
    if sys.version_info[:2] >= MIN_PYTHON:
        out.print("✅ Python version is compatible")
    else:
        out.print(f"❌ Python {MIN_PYTHON[0]}.{MIN_PYTHON[1]} or higher is required")
        failures.append("python")

    out.print("\n[bold]📦 DEPENDENCIES CHECK[/bold]")
    for package in REQUIRED_PACKAGES:
        try:
            importlib.import_module(package)
            out.print(f"✅ {package} is installed")
        except ImportError:
            out.print(f"❌ {package} is not installed")
            failures.append(package)

    out.print("\n[bold]📁 FILES CHECK[/bold]")
    brands_file = settings.BRANDS_FILE
    try:
        with open(brands_file, "r", encoding="utf-8") as f:
            brands = json.load(f)
        if isinstance(brands, list) and brands:
            out.print(f"✅ {brands_file} contains {len(brands)} brands")
        else:
            out.print(f"❌ {brands_file} is not a valid array")
            failures.append("brands_file")
    except (OSError, ValueError) as e:
        out.print(f"❌ Error reading {brands_file}: {e}")
        failures.append("brands_file")

    out.print("\n[bold]🔑 ENVIRONMENT CHECK[/bold]")
    if settings.OPENROUTER_API_KEY:
        out.print(f"✅ OPENROUTER_API_KEY is set ({len(settings.OPENROUTER_API_KEY)} characters)")
    else:
        out.print("❌ OPENROUTER_API_KEY is not set")
        out.print('💡 Set it with: export OPENROUTER_API_KEY="your-key-here"')
        out.print("💡 Or create a .env file with: OPENROUTER_API_KEY=your-key-here")
        failures.append("api_key")

    if os.path.exists(".env"):
        out.print("✅ .env file exists")
    else:
        out.print("ℹ️  No .env file (optional)")

    out.print("\n[bold]💾 OUTPUT CHECK[/bold]")
    try:
        os.makedirs(settings.OUTPUT_DIR, exist_ok=True)
        if os.access(settings.OUTPUT_DIR, os.W_OK):
            out.print(f"✅ {settings.OUTPUT_DIR} is writable")
        else:
            out.print(f"❌ {settings.OUTPUT_DIR} is not writable")
            failures.append("output_dir")
    except OSError as e:
        out.print(f"❌ Cannot create {settings.OUTPUT_DIR}: {e}")
        failures.append("output_dir")

    if failures:
        out.print(f"\n[red]❌ Setup incomplete: {', '.join(failures)}[/red]")
    else:
        out.print("\n[green]✅ Setup complete! Try: brandfinder gpt-4o-mini 3 0[/green]")
    return failures


def main():
    """Entry point for the brandfinder-setup command."""
    sys.exit(1 if check_setup() else 0)


if __name__ == "__main__":
    main()
