"""Allow ``python -m src.cli`` as a shortcut for ``python -m src.cli.resolve``."""

from src.cli.resolve import main

main()
