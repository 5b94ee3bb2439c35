import argparse
import curses

from repl_console import __version__
from repl_console.app import run_console
from repl_console.config import load_config


def main():
    p = argparse.ArgumentParser(description="Curses Python console")
    p.add_argument("-v", "--version", action="version",
                   version=f"%(prog)s {__version__}")
    p.add_argument("-c", "--config", default="default",
                   help="Configuration name or path (searches ~/.repl-console/configs/, ./configs/, or use full path)")
    p.add_argument("--history-length", type=int, default=None, metavar="N",
                   help="Number of input lines kept for recall - overrides config")
    p.add_argument("--no-color", action="store_true", default=False,
                   help="Disable colored prompts and status line")
    p.add_argument("-d", "--debug", action="store_true", default=False,
                   help="Enable debug logging to console_*.log files in current directory")
    args = p.parse_args()

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        p.error(str(e))

    # CLI arguments override config values
    if args.history_length is not None:
        config.history.length = args.history_length
    try:
        config.validate()
    except ValueError as e:
        p.error(str(e))

    curses.wrapper(run_console, config, color=not args.no_color, debug=args.debug)


if __name__ == "__main__":
    main()
