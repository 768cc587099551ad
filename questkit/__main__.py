"""
Entry point for running questkit as a module.

Usage:
    python -m questkit validate game.json
    python -m questkit summary game.json --quiz
    python -m questkit --help
"""
from .cli import main

if __name__ == "__main__":
    main()
