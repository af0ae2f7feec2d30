"""Allow ``python -m picoprep``."""

from picoprep.cli.main import app

app()
