"""Module entrypoint for ``python -m todotree``.

A thin wrapper around :func:`todotree.cli.main`; the CLI return code becomes the process exit
status. Equivalent to the ``todotree`` console script (``todotree.cli:main`` in
``pyproject.toml``).

Errors are not caught here: an unreadable or unwritable todo file surfaces as an ``OSError``
with a stack trace and a non-zero exit. Malformed lines in the todo file are not errors; they
are reported on stderr as ``[todotree] warning: ...`` and skipped.
"""

from __future__ import annotations

from .cli import main

if __name__ == "__main__":
    raise SystemExit(main())
