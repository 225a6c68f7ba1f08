#!/usr/bin/env python
"""
Run the quote API with uvicorn.

Usage:
    python scripts/run_api.py [--host 0.0.0.0] [--port 8000] [--store data/store.json] [--reload]
"""
import argparse
import os
import subprocess
import sys
from pathlib import Path


def main():
    parser = argparse.ArgumentParser(description="Run the quote API")
    parser.add_argument('--host', default='127.0.0.1')
    parser.add_argument('--port', type=int, default=8000)
    parser.add_argument('--store', help="JSON file holding the saved rate table")
    parser.add_argument('--reload', action='store_true', help="Restart on code changes")
    args = parser.parse_args()

    project_root = Path(__file__).parent.parent

    # Ensure src is importable without an editable install
    env = os.environ.copy()
    src_path = str(project_root / "src")
    env["PYTHONPATH"] = os.pathsep.join(p for p in (src_path, env.get("PYTHONPATH")) if p)
    if args.store:
        env['HAUL_QUOTE_STORE'] = str(Path(args.store).resolve())

    cmd = [
        sys.executable, "-m", "uvicorn",
        "haul_quote.api.main:app",
        "--host", args.host,
        "--port", str(args.port),
    ]
    if args.reload:
        cmd.append("--reload")

    print(f"Starting Haul Quote API on {args.host}:{args.port}...")
    try:
        subprocess.run(cmd, cwd=str(project_root), env=env)
    except KeyboardInterrupt:
        print("\nAPI stopped.")


if __name__ == "__main__":
    main()
