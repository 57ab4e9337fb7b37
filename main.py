#!/usr/bin/env python3
"""
Main entry point for the CRISP development environment bootstrap
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from crisp_bootstrap.core.errors import BootstrapError
from crisp_bootstrap.core.orchestrator import BootstrapOrchestrator
from crisp_bootstrap.utils.logging import setup_root_logger
from config.settings import Settings


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Set up and start the Enclave CRISP development environment"
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file (JSON format)"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write a rotating log file"
    )

    return parser.parse_args(argv)


def load_config(args) -> Settings:
    """Load configuration from file, environment and command line."""
    config_data = {}
    if args.config:
        with open(args.config) as f:
            config_data = json.load(f)
        if not isinstance(config_data, dict):
            raise ValueError(f"Configuration file must contain a JSON object: {args.config}")

    # Override with command line args
    if args.log_level:
        config_data.setdefault("logging", {})["level"] = args.log_level
    if args.log_file:
        config_data.setdefault("logging", {})["file_path"] = str(args.log_file)

    return Settings(**config_data)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    args = parse_arguments(argv)

    # Load environment variables from .env file
    load_dotenv()

    try:
        settings = load_config(args)
    except (OSError, ValueError, ValidationError) as e:
        # Logging is not configured yet
        setup_root_logger(level=args.log_level or "INFO")
        logging.getLogger(__name__).error(f"Invalid configuration: {e}")
        sys.exit(1)

    setup_root_logger(
        settings.logging.file_path,
        settings.logging.level,
        max_file_size_mb=settings.logging.max_file_size_mb,
        backup_count=settings.logging.backup_count
    )
    logger = logging.getLogger(__name__)
    logger.debug(f"Arguments: {vars(args)}")

    try:
        result = BootstrapOrchestrator(settings).run()
    except BootstrapError as e:
        logger.error(str(e))
        sys.exit(e.exit_code)
    except KeyboardInterrupt:
        logger.error("Interrupted")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        logger.debug("Traceback", exc_info=True)
        sys.exit(1)

    logger.debug(f"Finished in {result.duration_seconds:.2f} seconds")
    sys.exit(result.exit_code or 0)


if __name__ == "__main__":
    main()
