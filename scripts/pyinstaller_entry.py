"""PyInstaller entrypoint for LinkedIn Outreach.

Default behavior starts the API server.
CLI behavior is available via:
    li-outreach cli <subcommands...>
"""

from __future__ import annotations

import sys

from li_outreach.app import main as app_main
from li_outreach.cli import main as cli_main


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "cli":
        sys.argv = [sys.argv[0], *sys.argv[2:]]
        cli_main()
    else:
        app_main()
