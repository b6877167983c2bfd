"""
Entry point for running the skills server as a module.

Usage:
    python -m reviewflow.server
    python -m reviewflow.server --port 4010 --host 127.0.0.1
"""

from .cli import main

if __name__ == "__main__":
    main()
