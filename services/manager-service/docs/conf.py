"""Sphinx configuration for the Manager Service documentation."""

from __future__ import annotations

import os
import sys
from datetime import datetime

SERVICE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SCHEMAS_DIR = os.path.abspath(os.path.join(SERVICE_DIR, "..", "..", "libs", "python"))
sys.path[:0] = [SERVICE_DIR, SCHEMAS_DIR]


project = "Manager Service"
author = "Ticketing Platform Team"
copyright = f"{datetime.now():%Y}, {author}"
release = "0.1.0"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
    "sphinx.ext.viewcode",
    "sphinx_autodoc_typehints",
]

# Postgres drivers are not needed to render the API reference.
autodoc_mock_imports = ["psycopg", "psycopg_pool"]
autodoc_typehints = "description"
autodoc_preserve_defaults = True
napoleon_google_docstring = False
napoleon_numpy_docstring = True

exclude_patterns: list[str] = ["_build"]
html_theme = "alabaster"
