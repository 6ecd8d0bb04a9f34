"""Allow ``python -m codesearch``."""

from codesearch.cli import cli

cli()
