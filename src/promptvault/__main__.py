"""
PromptVault Package Main Entry Point

This module serves as the main entry point when the package is run as a
module using `python -m promptvault`. It delegates to the Typer app.
"""

import logging
import sys

from promptvault.cli.common.error_handler import handle_cli_error
from promptvault.cli.typer_app import app

logger = logging.getLogger(__name__)


def main() -> None:
    try:
        app()
    except SystemExit:
        raise
    except (KeyboardInterrupt, Exception) as e:  # noqa: BLE001
        sys.exit(handle_cli_error(e, "promptvault-main"))


if __name__ == "__main__":
    main()
