"""Entry point for 'python -m todoapi' command."""

from todoapi.cli import main

if __name__ == "__main__":
    main()
