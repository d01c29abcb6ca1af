#!/usr/bin/env python3
"""
Rule Agent - Main Entry Point
=============================

Command-line interface for running the rule agent.

Usage:
    python main.py --web                 # Start web UI and endpoint
    python main.py --tui                 # Chat in the terminal (in-process)
    python main.py --tui --endpoint URL  # Chat with a running web server
    python main.py --ask "2 + 2"         # Answer one message and exit
    python main.py --rules               # Show classification order
"""

import sys
import argparse
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from core.config import load_config, Config
from core.logging import setup_logging, get_logger
from core.exceptions import RuleAgentError

logger = get_logger("main")


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Rule Agent - rule-based chat responder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --web                        Start web UI on default port
  python main.py --web --port 9000            Start web UI on port 9000
  python main.py --tui                        Chat in the terminal
  python main.py --tui --endpoint http://127.0.0.1:8080
  python main.py --ask "what can you do"      Answer one message
        """
    )

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        "--web",
        action="store_true",
        help="Start web UI server"
    )
    mode_group.add_argument(
        "--tui",
        action="store_true",
        help="Start terminal chat"
    )
    mode_group.add_argument(
        "--ask",
        type=str,
        metavar="MESSAGE",
        help="Answer a single message and print the reply"
    )
    mode_group.add_argument(
        "--rules",
        action="store_true",
        help="Print the classification rules in evaluation order"
    )

    parser.add_argument(
        "--config",
        type=str,
        metavar="PATH",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--endpoint",
        type=str,
        metavar="URL",
        help="Agent server for --tui (default: answer in-process)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for web UI (default: from config, 8080)"
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host for web UI (default: from config, 127.0.0.1)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode"
    )

    return parser.parse_args(argv)


def run_ask(config: Config, message: str) -> None:
    """Answer one message and print the reply."""
    from services.responder import Responder

    responder = Responder.from_config(config.responder)
    reply = responder.reply(message)

    print(reply.response)
    logger.debug(f"Rule: {reply.rule} | Latency: {reply.latency_ms}ms")


def run_show_rules(config: Config) -> None:
    """Print the classification order."""
    from services.responder import Responder

    responder = Responder.from_config(config.responder)

    print("\nClassification order (first match wins)")
    print("-" * 40)
    for i, rule in enumerate(responder.rules.to_list(), start=1):
        print(f"  {i}. {rule['name']:<13} {rule['match_type']:<9} {', '.join(rule['patterns'])}")
        if rule["name"] == "question":
            for sub in responder.question_rules.to_list():
                print(f"       - {sub['name']:<12} {', '.join(sub['patterns'])}")


def run_web_ui(config: Config, host: str, port: int, debug: bool) -> None:
    """Run the web UI server."""
    from ui.web.app import run_app

    print(f"\nStarting Web UI on http://{host}:{port}")
    print("Press Ctrl+C to stop\n")

    run_app(host=host, port=port, debug=debug, config=config)


def run_terminal_ui(config: Config, endpoint: str = None) -> None:
    """Run the terminal chat."""
    from ui.terminal.app import run_tui

    run_tui(config=config, endpoint_url=endpoint)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = load_config(args.config)

        if args.debug:
            config.debug = True

        # The TUI owns the terminal, so it only logs to files.
        setup_logging(
            log_dir=config.log_dir,
            log_level="DEBUG" if args.debug else config.logging.level,
            json_format=config.logging.json_format,
            console_output=config.logging.console_output and not args.tui and not args.ask
        )

        if args.web:
            host = args.host or config.ui.web_host
            port = args.port or config.ui.web_port
            run_web_ui(config, host, port, args.debug or config.ui.web_debug)
        elif args.tui:
            run_terminal_ui(config, args.endpoint)
        elif args.ask is not None:
            run_ask(config, args.ask)
        elif args.rules:
            run_show_rules(config)
        else:
            print("No mode specified. Use --web, --tui, --ask, --rules or --help")
            print("\nQuick start:")
            print("  python main.py --web    # Start web UI")
            print("  python main.py --tui    # Chat in the terminal")

        return 0

    except RuleAgentError as e:
        print(f"\nError: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 0


if __name__ == "__main__":
    sys.exit(main())
