#!/usr/bin/env python3
"""
Entry point for running the championship admin server.

Usage:
    python run_web.py [--host HOST] [--port PORT] [--reload] [--data-dir DIR]

Examples:
    python run_web.py                    # Run on localhost:8000
    python run_web.py --port 3000        # Run on localhost:3000
    python run_web.py --host 0.0.0.0     # Allow external connections
    python run_web.py --data-dir /tmp/c  # Use another championship database
"""
import argparse
import logging
import os
import uvicorn


def main():
    parser = argparse.ArgumentParser(description="Run the championship admin server")
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind to (default: 8000)"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload on code changes"
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default="data",
        help="Directory for the championship database (default: data)"
    )
    parser.add_argument(
        "--tick-mode",
        type=str,
        choices=["attempt", "round"],
        default="attempt",
        help="Default tick granularity (default: attempt)"
    )

    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] %(name)s: %(message)s')

    # The app module reads these when it builds its runner
    os.environ["CHAMPSIM_DATA_DIR"] = args.data_dir
    os.environ["CHAMPSIM_TICK_MODE"] = args.tick_mode

    print(f"Starting championship admin server at http://{args.host}:{args.port}")
    print(f"API documentation: http://{args.host}:{args.port}/docs")
    print()

    uvicorn.run(
        "champsim.web.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload
    )


if __name__ == "__main__":
    main()
