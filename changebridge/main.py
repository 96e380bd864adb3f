"""Composition root for the change request adapter.

This module is the ONLY location that imports both core domain logic
and concrete adapter implementations. All wiring of dependencies
happens here, creating a clear entry point for the application.

Module Structure:
- Configuration loading via config module
- Transport instantiation
- Adapter initialization and status subscription
- Entry point selection (once, monitor, cli)
"""

import asyncio
import json
import logging
import sys
from typing import Any

from changebridge.adapters.cli.commands import CLICommandHandler
from changebridge.adapters.scheduler.monitor import HealthCheckScheduler
from changebridge.adapters.transport.servicenow import ServiceNowConnector
from changebridge.config import Settings, load_settings
from changebridge.core.adapter import ServiceNowAdapter
from changebridge.core.models import HealthStatus


async def _run_cli_interactive(cli_handler: CLICommandHandler) -> None:
    """Run interactive CLI loop.

    Provides a REPL-like interface for adapter commands.

    Args:
        cli_handler: CLICommandHandler instance for executing commands.
    """
    logger = logging.getLogger(__name__)
    logger.info("Starting interactive CLI. Type 'help' for available commands or 'exit' to quit.")

    loop = asyncio.get_running_loop()

    while True:
        try:
            # Read command from stdin in a thread to avoid blocking
            command_line = await loop.run_in_executor(
                None,
                input,
                "changebridge> "
            )

            command_line = command_line.strip()

            if not command_line:
                continue

            if command_line.lower() == "exit":
                logger.info("Exiting CLI")
                break

            if command_line.lower() == "help":
                _print_cli_help()
                continue

            parts = command_line.split(maxsplit=1)
            command = parts[0].lower()
            args_str = parts[1] if len(parts) > 1 else ""

            try:
                args = json.loads(args_str) if args_str else {}
            except json.JSONDecodeError:
                logger.error("Invalid JSON arguments. Use 'help' for command syntax.")
                continue

            try:
                result = await _execute_cli_command(cli_handler, command, args)
                print(json.dumps(result, indent=2, default=str))
            except Exception as e:
                logger.error(f"Command execution error: {e}", exc_info=True)
                print(json.dumps({"status": "error", "message": str(e)}, indent=2))

        except EOFError:
            # Ctrl+D to exit
            logger.info("EOF received, exiting CLI")
            break
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
            continue
        except Exception as e:
            logger.error(f"CLI error: {e}", exc_info=True)


async def _execute_cli_command(
    cli_handler: CLICommandHandler,
    command: str,
    args: Any,
) -> dict[str, Any]:
    """Execute a CLI command.

    Args:
        cli_handler: CLICommandHandler instance.
        command: Command name.
        args: Command arguments.

    Returns:
        Command result dictionary.

    Raises:
        ValueError: If command is not recognized or arguments are invalid.
    """
    if not isinstance(args, dict):
        raise ValueError("Command arguments must be a JSON object")

    if command == "healthcheck":
        return await cli_handler.healthcheck()

    elif command == "get":
        return await cli_handler.get_records(output_format=args.get("format", "json"))

    elif command == "post":
        payload = args.get("payload")
        if payload is not None and not isinstance(payload, dict):
            raise ValueError("payload must be a JSON object")
        return await cli_handler.post_record(payload=payload)

    else:
        raise ValueError(f"Unknown command: {command}. Use 'help' for available commands.")


def _print_cli_help() -> None:
    """Print CLI help message."""
    help_text = """
Available Commands (JSON format):

  healthcheck
    Check the remote instance and emit ONLINE or OFFLINE.

    Example: healthcheck

  get
    Retrieve change records in canonical shape.
    Optional: format ("json" or "text")

    Example: get {"format": "text"}

  post
    Create a change record.
    Optional: payload (defaults to SERVICENOW_RECORD_PAYLOAD)

    Example: post {"payload": {"short_description": "Patch web tier"}}

  help
    Show this help message.

  exit
    Exit the CLI.
    """
    print(help_text)


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.INFO)

    if log_format == "json":
        format_str = '{"time": "%(asctime)s", "level": "%(levelname)s", "message": "%(message)s"}'
    else:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


def build_adapter(settings: Settings) -> ServiceNowAdapter:
    """Instantiate the transport and adapter for the configured instance.

    A listener is subscribed to both status events so transitions show
    up in the application log.
    """
    logger = logging.getLogger(__name__)
    config = settings.to_connection_config()

    connector = ServiceNowConnector(
        config,
        query_limit=settings.servicenow_query_limit,
        timeout=settings.request_timeout_seconds,
    )
    adapter = ServiceNowAdapter(
        settings.servicenow_instance_id,
        config,
        connector,
        logger=logging.getLogger("changebridge.adapter"),
    )

    for status in HealthStatus:
        adapter.on(
            status.value,
            lambda payload, status=status: logger.info(
                f"Adapter {payload['id']} reported {status.value}"
            ),
        )
    return adapter


async def bootstrap() -> None:
    """Load configuration, wire adapters, and start the application.

    Steps:
    1. Load configuration from environment
    2. Configure logging
    3. Instantiate transport and adapter
    4. Connect (initial health check)
    5. Run the selected mode
    """
    settings = load_settings()

    configure_logging("DEBUG" if settings.debug else settings.log_level, settings.log_format)
    logger = logging.getLogger(__name__)
    logger.info(
        f"Loading ServiceNow adapter {settings.servicenow_instance_id} "
        f"for {settings.servicenow_url} (table {settings.servicenow_table})"
    )

    adapter = build_adapter(settings)

    try:
        await adapter.connect()

        logger.info(f"Starting in {settings.run_mode} mode...")

        if settings.run_mode == "once":
            result = await CLICommandHandler(adapter).get_records()
            print(json.dumps(result, indent=2, default=str))

        elif settings.run_mode == "monitor":
            scheduler = HealthCheckScheduler(
                adapter,
                interval_seconds=settings.healthcheck_interval_seconds,
            )
            await scheduler.start()

        elif settings.run_mode == "cli":
            await _run_cli_interactive(CLICommandHandler(adapter))

        else:
            logger.error(f"Unknown run mode: {settings.run_mode}")
            sys.exit(1)

    finally:
        await adapter.transport.close()


def main() -> None:
    """Application entry point.

    Exit codes:
        0: Successful shutdown
        1: Fatal bootstrap or runtime error
        130: Interrupted by user (SIGINT/KeyboardInterrupt)
    """
    logger = logging.getLogger(__name__)
    try:
        asyncio.run(bootstrap())
    except KeyboardInterrupt:
        logger.warning("Shutdown requested by user (SIGINT)")
        sys.exit(130)
    except asyncio.CancelledError:
        logger.info("Graceful shutdown completed")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
