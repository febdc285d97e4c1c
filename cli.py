# -*- coding: utf-8 -*-
"""Console script entry points for ErrorPy."""

import sys
from pathlib import Path


def bot() -> None:
    """Run the ErrorPy Discord bot."""
    # ErrorPy/ must be on sys.path so internal imports (utils, modules) resolve.
    errorpy_dir = str(Path(__file__).resolve().parent / "ErrorPy")
    if errorpy_dir not in sys.path:
        sys.path.insert(0, errorpy_dir)

    from bot import app

    app()
