"""
Run the API under uvicorn.

Usage:
    logitrack-serve --host 0.0.0.0 --port 8000

Environment variables:
    HOST / PORT: bind address (defaults: 127.0.0.1 / 8000)
"""
import argparse
import os

import uvicorn


def main(argv=None):
    parser = argparse.ArgumentParser(description="Serve the LogiTrack API")
    parser.add_argument("--host", default=os.getenv("HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))
    parser.add_argument("--reload", action="store_true", help="restart on code changes (development)")
    args = parser.parse_args(argv)
    uvicorn.run("logitrack.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
