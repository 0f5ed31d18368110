"""
Entry point for running Uptimechamps as a module.

Usage:
    python -m uptimechamps [command] [options]
"""

from uptimechamps.cli import main

if __name__ == "__main__":
    main()
