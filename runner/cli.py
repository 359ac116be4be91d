from __future__ import annotations

import argparse
import os


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments for the smoke runner."""
    parser = argparse.ArgumentParser(description="Robot control API smoke runner")
    parser.add_argument("--base-url", default=os.getenv("BASE_URL", "http://127.0.0.1:8000"))
    parser.add_argument("--username", default=os.getenv("ROBOT_API_USERNAME", "user"))
    parser.add_argument("--password", default=os.getenv("ROBOT_API_PASSWORD", "password"))
    parser.add_argument("--robot", default="Robot1")
    parser.add_argument("--timeout", type=float, default=20.0, help="health wait, seconds")
    return parser.parse_args(argv)
