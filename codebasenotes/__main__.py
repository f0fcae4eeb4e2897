"""Module entrypoint for ``python -m codebasenotes``.

This keeps module-mode execution behavior identical to the CLI script.
All argument parsing and store setup happen in ``codebasenotes.cli``.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
