"""Allow ``python -m tmm``."""

from .cli import main

main()
