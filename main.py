"""Core Registry logger command-line interface."""

from core_registry_logger.cli import main

if __name__ == "__main__":
    main()
