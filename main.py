"""Buyan Studio: dev launcher. Starts the API server."""

import argparse
import logging
import os
from pathlib import Path

import uvicorn

from buyan_studio import config


def main():
    parser = argparse.ArgumentParser(description="Buyan Studio dev launcher")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Data storage directory (default: ./data)")
    parser.add_argument("--host", default=config.HOST)
    parser.add_argument("--port", type=int, default=config.PORT)
    parser.add_argument("--reload", action="store_true",
                        help="Restart the server when source files change")
    args = parser.parse_args()

    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # The env var reaches reloader subprocesses, the attribute this process
    if args.data_dir:
        os.environ["DATA_DIR"] = str(args.data_dir.resolve())
        config.DATA_DIR = args.data_dir.resolve()

    print(f"Starting Buyan Studio on http://localhost:{args.port} ...")
    uvicorn.run("buyan_studio.app:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
