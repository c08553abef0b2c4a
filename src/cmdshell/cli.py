"""Command line entry point: a bare shell over the built-in commands."""

import argparse
import sys
from pathlib import Path

from .config import CONFIG_FILE, build_config, load_config_from_yaml
from .logging import get_logger, setup_logging
from .session import Session

logger = get_logger("cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cmdshell",
        description="Line-oriented command shell",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=CONFIG_FILE,
        help=f"YAML configuration file (default: {CONFIG_FILE})",
    )
    parser.add_argument("--prompt", help="Prompt string")
    parser.add_argument("--history-file", help="History file name")
    parser.add_argument(
        "--enable-shell", action="store_true", help="Allow '!' shell escapes"
    )
    parser.add_argument(
        "--enable-async", action="store_true", help="Install the 'go' background built-in"
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        help="Log level",
    )
    parser.add_argument("--log-json", action="store_true", help="Log JSON lines")
    parser.add_argument("--log-file", type=Path, help="Log to this file instead of stderr")
    parser.add_argument(
        "-c",
        "--command",
        metavar="LINE",
        help="Dispatch a single line and exit instead of starting the loop",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    yaml_config = load_config_from_yaml(args.config)
    try:
        config = build_config(
            yaml_config,
            prompt=args.prompt,
            history_file=args.history_file,
            enable_shell=True if args.enable_shell else None,
            enable_async=True if args.enable_async else None,
            log_level=args.log_level,
            log_json=True if args.log_json else None,
            log_file=args.log_file,
        )
    except (TypeError, ValueError) as e:
        print(f"cmdshell: invalid configuration: {e}", file=sys.stderr)
        return 2

    setup_logging(level=config.log_level, json_output=config.log_json, log_file=config.log_file)

    session = Session.from_config(config)
    if args.command is not None:
        session.one_cmd(args.command.strip())
        return 0

    logger.debug("Starting interactive shell", history_file=config.history_file or None)
    session.cmd_loop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
