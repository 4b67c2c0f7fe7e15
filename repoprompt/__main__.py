"""Module entrypoint for ``python -m repoprompt``.

This keeps module-mode execution behavior identical to the CLI script.
All argument parsing and logging setup happen in ``repoprompt.cli``.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
