#!/usr/bin/env python3
"""Entry point for systemyml."""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .app import SystemYml
from .core.config_manager import ConfigManager
from .core.deployer import Deployer
from .core.service_manager import ServiceManager
from .exceptions import InvalidInputPath, ParseError
from .utils.constants import APP_NAME, LOG_FORMAT

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_FATAL = 2


def setup_logging(verbose: bool = False, log_file: Optional[str] = None):
    """Set up application logging.

    Args:
        verbose: Log at DEBUG instead of INFO
        log_file: Optional file to log to in addition to stderr
    """
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        handlers=handlers
    )


def build_parser() -> argparse.ArgumentParser:
    """Create the command line parser."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Creates systemd service units from YAML configuration files."
    )
    parser.add_argument('-c', '--config', metavar='PATH',
                        help='Directory or YAML file containing service configuration '
                             '(default: services)')
    parser.add_argument('-t', '--target', metavar='DIRECTORY',
                        help='Target directory for systemd service units '
                             '(default: /etc/systemd/system)')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging')
    parser.add_argument('--stdout', action='store_true',
                        help='Print the generated service units to stdout')
    parser.add_argument('--dryrun', action='store_true',
                        help='Describe what would happen without making changes')
    parser.add_argument('--safe', action='store_true',
                        help='Copy service units to the target directory without starting services')
    parser.add_argument('--user', action='store_true', default=None,
                        help='Manage units of the user service manager (systemctl --user)')
    parser.add_argument('--settings', metavar='PATH',
                        help='Settings file (default: ~/.config/systemyml/config.yaml)')
    parser.add_argument('--log-file', metavar='PATH',
                        help='Also write log output to this file')
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    setup_logging(args.verbose, args.log_file)
    logger = logging.getLogger(__name__)
    logger.info("Starting the program.")

    config_manager = ConfigManager(args.settings)
    config_manager.load_config()

    user_mode = args.user if args.user is not None else config_manager.get_setting("user_mode")
    config_path = args.config or config_manager.get_setting("config_path")
    target_dir = args.target or config_manager.resolve_target_dir(user_mode)

    service_manager = ServiceManager(
        user_mode=user_mode,
        timeout=config_manager.get_setting("systemctl_timeout")
    )
    deployer = Deployer(
        target_dir,
        service_manager=service_manager,
        dry_run=args.dryrun,
        safe=args.safe,
        print_units=args.stdout
    )
    app = SystemYml(deployer)

    try:
        report = app.run(config_path)
    except (InvalidInputPath, ParseError) as e:
        logger.error(str(e))
        return EXIT_FATAL

    if not report.ok:
        for name, error in report.failures:
            logger.error(f"{name}: {error}")
        logger.error(f"Completed with {len(report.failures)} failures")
        return EXIT_FAILURES

    logger.info("Program completed successfully.")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
