"""Entrypoint for ``python -m peek``; identical to the ``peek`` console script."""

from .cli import main

if __name__ == "__main__":
    main()
