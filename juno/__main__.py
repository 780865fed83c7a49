"""Allow running the CLI with ``python -m juno``."""

from .cli import app

if __name__ == "__main__":
    app()
