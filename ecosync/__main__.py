"""
Run ecosync as a module.

Usage:
    python -m ecosync sync --verify
"""

from .main import cli

if __name__ == "__main__":
    cli(prog_name="ecosync")
