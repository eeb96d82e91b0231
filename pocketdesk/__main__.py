"""
Module entrypoint for the PocketDesk CLI.

This file exists so that `python -m pocketdesk ...` works when the console
script wrapper is not installed. It delegates to `pocketdesk.cli`.
"""

from __future__ import annotations

from pocketdesk.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
