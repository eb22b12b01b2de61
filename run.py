import argparse
import logging
import signal
import sys
import threading
import yaml

from errors import ConfigError
from host import ExtensionHost
from models import UpdateReason
from utils.logging_config import configure_logging


def load_config(path: str) -> dict:
    try:
        with open(path, 'r') as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}")


def main():
    parser = argparse.ArgumentParser(description="Sunrise/Sunset widget extension host")
    parser.add_argument("--config", default="config.yaml")
    parser.add_argument("--once", action="store_true", help="Run a single update cycle and exit")
    parser.add_argument("--verbose", action="store_true", help="Set log level to DEBUG")
    clock = parser.add_mutually_exclusive_group()
    clock.add_argument("--24h", dest="clock_24h", action="store_const", const=True,
                       help="Show times as HH:mm")
    clock.add_argument("--12h", dest="clock_24h", action="store_const", const=False,
                       help="Show times as h:mm AM/PM")
    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    # CLI overrides
    if args.verbose:
        config["logging"] = config.get("logging", {}) or {}
        config["logging"]["level"] = "DEBUG"
    if args.clock_24h is not None:
        config["display"] = config.get("display", {}) or {}
        config["display"]["clock_24h"] = args.clock_24h

    configure_logging(config)
    logger = logging.getLogger("run")

    try:
        host = ExtensionHost.from_config(config)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    if args.once:
        data = host.run_once(UpdateReason.MANUAL)
        host.extension.on_destroy()
        if data is None:
            logger.warning("Nothing published this cycle")
            sys.exit(2)
        print(data.status if data.visible else "(hidden)")
        print(data.expanded_title)
        print(data.expanded_body)
        return

    stop_event = threading.Event()

    def handle_sig(sig, frame):
        logger.info("Shutdown signal received. Stopping...")
        stop_event.set()

    signal.signal(signal.SIGINT, handle_sig)
    signal.signal(signal.SIGTERM, handle_sig)

    try:
        host.run(stop_event)
    except Exception:
        logger.exception("Fatal error in host loop")
        sys.exit(1)


if __name__ == "__main__":
    main()
