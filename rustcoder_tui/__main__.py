"""CLI entrypoint for rustcoder-tui."""

from __future__ import annotations

import argparse
from importlib import metadata
from pathlib import Path
from typing import Any, Sequence

from .app import RustCoderApp
from .config import ensure_config_dir, load_config
from .logging_utils import configure_logging


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rustcoder-tui",
        description="Knowledge base ingestion and Rust code assistant TUI",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to an alternative config.toml",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="Backend base URL (overrides backend.base_url)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Load configuration, handle CLI flags, and run the TUI."""

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.version:
        try:
            version = metadata.version("rustcoder-tui")
        except metadata.PackageNotFoundError:
            version = "0.0.0"
        print(f"rustcoder-tui {version}")
        return

    ensure_config_dir()
    overrides: dict[str, Any] = {}
    if args.base_url:
        overrides["backend"] = {"base_url": args.base_url}
    config = load_config(config_path=args.config, overrides=overrides)
    configure_logging(config["logging"])
    app = RustCoderApp(config=config)
    app.run()


if __name__ == "__main__":
    main()
