"""Entry point for running the CodeMentor server.

This module provides the main entry point for CodeMentor.
It handles:
- Configuration loading
- Logging setup with secret sanitization
- Health checks and configuration dry runs
- Serving the web application with uvicorn
"""

import argparse
import asyncio
import sys
from pathlib import Path

import structlog

from code_mentor._version import __version__
from code_mentor.utils.logging import LogEventNames

log = structlog.get_logger()


def setup_logging(
    debug: bool = False,
    log_format: str = "console",
    file_path: Path | None = None,
    file_enabled: bool = False,
) -> None:
    """Configure structured logging with secret sanitization.

    Args:
        debug: Enable debug logging if True
        log_format: Output format ("json" or "console")
        file_path: Path to log file (if file logging enabled)
        file_enabled: Whether to enable file logging
    """
    from code_mentor.utils.logging import LogFormat, LogLevel, configure_logging

    level = LogLevel.DEBUG if debug else LogLevel.INFO
    fmt = LogFormat(log_format.lower()) if isinstance(log_format, str) else log_format

    configure_logging(
        level=level,
        log_format=fmt,
        file_path=file_path,
        file_enabled=file_enabled,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed argument namespace
    """
    parser = argparse.ArgumentParser(
        prog="code-mentor",
        description="CodeMentor - code review and execution tracing for students",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to an optional YAML configuration file",
    )

    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse config and validate without starting the server",
    )

    parser.add_argument(
        "--format",
        choices=["json", "console"],
        default="console",
        help="Log output format (default: console)",
    )

    parser.add_argument(
        "--host",
        default=None,
        help="Bind address (overrides configuration)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Bind port (overrides configuration)",
    )

    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Run health check and exit",
    )

    return parser.parse_args(argv)


async def run_server(
    config_path: Path | None,
    dry_run: bool = False,
    health_check: bool = False,
    host: str | None = None,
    port: int | None = None,
) -> int:
    """Run the CodeMentor server.

    Args:
        config_path: Path to configuration file, or None for defaults
        dry_run: If True, only validate config without starting
        health_check: If True, run health check and exit
        host: Bind address override
        port: Bind port override

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    log.info(
        LogEventNames.SERVER_STARTING,
        version=__version__,
        config_path=str(config_path) if config_path else None,
    )

    try:
        from code_mentor.config.loader import load_config
        from code_mentor.utils.security import mask_config_value

        config = load_config(config_path)
        log.info(
            "configuration_loaded",
            model=config.llm.anthropic.model,
            api_key=mask_config_value("api_key", config.llm.anthropic.api_key or ""),
        )

        # Reconfigure logging from config file settings
        if config_path is not None:
            from code_mentor.utils.logging import configure_logging

            configure_logging(
                level=config.logging.level,
                log_format=config.logging.format,
                file_path=config.logging.file.path if config.logging.file.enabled else None,
                file_enabled=config.logging.file.enabled,
            )

        if dry_run:
            log.info("dry_run_mode_config_valid")
            return 0

        if health_check:
            from code_mentor.utils.health import HealthChecker

            checker = HealthChecker(config)
            report = await checker.run_all_checks()

            if report.healthy:
                log.info("health_check_passed", report=report.to_dict())
                return 0
            log.error("health_check_failed", report=report.to_dict())
            return 1

        import uvicorn

        from code_mentor.web.app import create_app

        app = create_app(config)
        server = uvicorn.Server(
            uvicorn.Config(
                app,
                host=host or config.server.host,
                port=port or config.server.port,
                log_config=None,
            )
        )
        await server.serve()
        log.info(LogEventNames.SERVER_STOPPED)
        return 0

    except FileNotFoundError as e:
        log.error("configuration_file_not_found", path=str(config_path), error=str(e))
        return 1
    except ValueError as e:
        # pydantic.ValidationError is a ValueError
        log.error("configuration_invalid", error=str(e))
        return 1
    except Exception as e:
        log.exception("fatal_error", error=str(e))
        return 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    setup_logging(
        debug=args.debug,
        log_format=args.format,
    )

    try:
        return asyncio.run(
            run_server(args.config, args.dry_run, args.health_check, args.host, args.port)
        )
    except KeyboardInterrupt:
        log.info("shutting_down_gracefully")
        return 0


if __name__ == "__main__":
    sys.exit(main())
