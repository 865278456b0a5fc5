"""irclog – long-running entry point.

Resolves the session configuration, connects to the IRC server and logs the
channel until the connection ends or a SIGTERM/SIGINT arrives.

    python -m main -s irc.example.org -p 6667 -n logbot -c biking -d /var/log/irc
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path

from config import ConfigError, load_config
from session_engine import SessionEngine

log = logging.getLogger("irclog")

USAGE_EPILOG = """\
Logs an IRC channel to {dir}/{server}_{channel}_{YYYY-MM-DD}.txt, rotating
every hour. Use "-d -" to log to standard output.

example:
  python -m main -s toto.skynet.nl -p 6667 -n toto -c biking -d /var/logs/irc/ -a alice
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="irclog",
        description="IRC channel logger with log rotation, history replay and memos",
        epilog=USAGE_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-s", "--server")
    parser.add_argument("-p", "--port", type=int)
    parser.add_argument("-n", "--nick")
    parser.add_argument("-c", "--channel")
    parser.add_argument("-d", "--dir", dest="log_dir", help='log directory, or "-" for stdout')
    parser.add_argument("-a", "--admin", dest="admins", action="append", help="admin nick (repeatable)")
    parser.add_argument("--history-max", type=int)
    parser.add_argument("--rotation-interval", type=float, help="seconds between rotations")
    parser.add_argument("--send-delay", type=float, help="seconds between bulk sends")
    parser.add_argument("--memo-store", dest="memo_store_path", help="NDJSON file for pending memos")
    parser.add_argument("--config", type=Path, help="YAML config file")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def cli_values(args: argparse.Namespace) -> dict:
    return {
        "server": args.server,
        "port": args.port,
        "nick": args.nick,
        "channel": args.channel,
        "log_dir": args.log_dir,
        "admins": args.admins,
        "history_max": args.history_max,
        "rotation_interval": args.rotation_interval,
        "send_delay": args.send_delay,
        "memo_store_path": args.memo_store_path,
    }


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Diagnostics go to stderr so they never mix with a stdout log target.
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        stream=sys.stderr,
    )

    try:
        config = load_config(cli_values(args), config_path=args.config)
    except ConfigError as e:
        parser.print_usage(sys.stderr)
        print(f"irclog: {e}", file=sys.stderr)
        return 1

    engine = SessionEngine(config)

    def _handle_signal(signum: int, _frame) -> None:
        log.info("Signal %s received, shutting down gracefully...", signum)
        engine.stop()

    signal.signal(signal.SIGTERM, _handle_signal)
    signal.signal(signal.SIGINT, _handle_signal)

    log.info("=== irclog starting ===")
    log.info("Server: %s:%d | Channel: #%s | Log dir: %s", config.server, config.port, config.channel, config.log_dir)
    try:
        engine.run()
    except OSError as e:
        log.error("Fatal: %s", e)
        return 1
    log.info("=== irclog stopped ===")
    return 0


if __name__ == "__main__":
    sys.exit(main())
