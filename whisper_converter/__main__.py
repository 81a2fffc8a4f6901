"""Package entry point for ``python -m whisper_converter``.

WHY: Users run the converter as ``python -m whisper_converter talk.json``
for CLI mode, or ``python -m whisper_converter --serve`` to start the
HTTP API.

HOW: Checks sys.argv for the ``--serve`` flag. If present, starts the
FastAPI app under uvicorn. Otherwise, delegates to the CLI's main().
"""

import sys

if __name__ == "__main__":
    if "--serve" in sys.argv:
        from whisper_converter.server.app import run_api
        run_api()
    else:
        from whisper_converter.cli import main
        main()
