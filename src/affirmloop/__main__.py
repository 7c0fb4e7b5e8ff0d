"""Entry point for running affirmloop as a module."""

from .cli import app


def main() -> None:
    """Main entry point for the affirmloop CLI application."""
    app()


if __name__ == "__main__":
    main()
