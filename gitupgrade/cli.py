"""Command-line entry point for gitupgrade."""

import argparse
import dataclasses
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import Config, load_configuration, validate_configuration
from .errors import ConfigurationError, UpgradeError
from .platform import get_platform_info, validate_git_availability
from .upgrade import ProcessRunner, UpgradeContext, UpgradeMode, Upgrader


def setup_logging(config: Config) -> None:
    """Configure console logging; git output is surfaced through it."""
    class StructuredFormatter(logging.Formatter):
        def format(self, record):
            if hasattr(record, 'operation'):
                record.msg = f"[{record.operation}] {record.msg}"
            return super().format(record)

    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logger = logging.getLogger('gitupgrade')
    logger.setLevel(getattr(logging, config.log_level))
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(StructuredFormatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        logger.addHandler(handler)
        logger.propagate = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitupgrade",
        description="Force a directory to mirror a remote Git branch. "
                    "Options override GITUPGRADE_* environment variables."
    )
    parser.add_argument("--dir", help="directory to synchronize")
    parser.add_argument("--remote-url", help="upstream repository URL")
    parser.add_argument("--remote-name", help="name to register the remote under")
    parser.add_argument("--branch", help="branch to mirror")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR or CRITICAL")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--hard", dest="mode", action="store_const", const=UpgradeMode.HARD,
                      help="discard Git metadata and rebuild the checkout")
    mode.add_argument("--default", dest="mode", action="store_const", const=UpgradeMode.DEFAULT,
                      help="fetch and reset the existing checkout")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Return a Config with command-line values replacing environment ones."""
    overrides = {
        "dir": args.dir,
        "remote_url": args.remote_url,
        "remote_name": args.remote_name,
        "branch": args.branch,
    }
    repository = dataclasses.replace(
        config.repository,
        **{key: value for key, value in overrides.items() if value is not None}
    )
    return Config(
        repository=repository,
        log_level=args.log_level or config.log_level,
        git_executable=config.git_executable,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run one upgrade and return the process exit status.

    Returns:
        0 on success, 1 on any upgrade failure
    """
    args = build_parser().parse_args(argv)

    try:
        config = apply_overrides(load_configuration(), args)
    except ConfigurationError as e:
        print(f"CRITICAL: {e.message}", file=sys.stderr)
        return 1

    setup_logging(config)
    logger = logging.getLogger('gitupgrade.cli')

    logger.info("=" * 60)
    system = get_platform_info().get_system_info()
    logger.info(f"gitupgrade {__version__} on {system['platform']} {system['release']} "
                f"(Python {system['python_version']})")
    logger.info("=" * 60)

    for issue in validate_configuration(config):
        if issue.startswith("ERROR"):
            logger.error(issue)
        else:
            logger.warning(issue)

    try:
        config.repository.validate()
    except ConfigurationError as e:
        logger.error(f"❌ Upgrade failed [{e.error_code}]: {e.message}")
        return 1

    runner = ProcessRunner(config.git_executable)
    git_available, git_error = validate_git_availability(runner)
    if not git_available:
        logger.error(f"❌ {git_error}")
        return 1

    context = UpgradeContext(
        repository=config.repository,
        mode=args.mode,
        git_executable=config.git_executable,
    )

    try:
        result = Upgrader(context, runner=runner).do()
    except UpgradeError as e:
        logger.error(f"❌ Upgrade failed [{e.error_code}]: {e.message}")
        if e.output:
            logger.error(f"Output of {e.step}:\n{e.output.rstrip()}")
        return 1

    suffix = " (fell back to hard mode)" if result.fell_back else ""
    logger.info(f"✅ {result.message}{suffix}")
    return 0
