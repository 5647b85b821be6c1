"""Module entry point: python -m skip_analyze ..."""

from __future__ import annotations

from skip_analyze.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
