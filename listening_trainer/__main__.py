"""Package entry point for ``python -m listening_trainer``.

``--serve`` starts the HTTP API; anything else goes to the CLI.
"""

import sys

if __name__ == "__main__":
    if "--serve" in sys.argv:
        from listening_trainer.server.app import run_api
        run_api()
    else:
        from listening_trainer.cli import main
        main()
