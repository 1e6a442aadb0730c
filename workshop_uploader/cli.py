"""Command line interface for workshop uploader."""
from __future__ import annotations

import argparse
import asyncio
import importlib
import logging
import os
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence

from rich.logging import RichHandler

from .cli_progress import (
    SubmitProgressDisplay,
    render_configuration_summary,
    render_package_table,
)
from . import __version__
from .config import load_config
from .errors import WorkshopError
from .models import Visibility, WorkshopConfig
from .orchestrator import WorkshopSession
from .protocols import IRemotePublishingAPI
from .services.dry_run import DryRunPublishingAPI
from .services.store import PackageStore
from .services.validator import Validator


LOG_LEVEL_ENV_VAR = "LOG_LEVEL"


class CLIError(RuntimeError):
    """Raised when CLI validation/execution fails."""


def _setup_logging(debug: bool, silent: bool, log_level: Optional[str]) -> str:
    """
    Configure logging.

    Default behavior is silent unless --debug, --log-level or $LOG_LEVEL is provided.
    Returns a string describing effective mode.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    logging.disable(logging.NOTSET)

    if silent or (not debug and not log_level):
        logging.disable(logging.CRITICAL)
        root_logger.setLevel(logging.CRITICAL + 1)
        return "silent"

    if debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, log_level.upper(), logging.INFO)

    handler = RichHandler(
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return logging.getLevelName(level)


def _strip_optional_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
        return value[1:-1]
    return value


def _load_env_file(path: Path, override: bool = False) -> None:
    if not path.exists():
        raise CLIError(f"env file not found: {path}")
    if not path.is_file():
        raise CLIError(f"env path is not a file: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"could not read env file {path}: {exc}") from exc

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].strip()
        if "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue

        value = _strip_optional_quotes(value.strip())
        if override or key not in os.environ:
            os.environ[key] = value


def _resolve_default_env_file() -> Optional[Path]:
    default_env = Path(".env")
    return default_env if default_env.exists() and default_env.is_file() else None


def _load_api_factory(target: str) -> Callable[[WorkshopConfig], IRemotePublishingAPI]:
    """Resolve 'package.module:attr' to a callable taking the config."""
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise CLIError(f"--api must look like 'module:factory', got {target!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise CLIError(f"cannot import API module {module_name}: {exc}") from exc
    factory = getattr(module, attr, None)
    if not callable(factory):
        raise CLIError(f"{target} is not callable")
    return factory


def _build_api(args: argparse.Namespace, config: WorkshopConfig) -> Optional[IRemotePublishingAPI]:
    if getattr(args, "dry_run", False):
        return DryRunPublishingAPI()
    if getattr(args, "api", None):
        return _load_api_factory(args.api)(config)
    return None


async def _drive(session: WorkshopSession, name: str, action: Callable[[], object]) -> int:
    """Run one remote action and tick until the orchestrator settles."""
    display = SubmitProgressDisplay(name)
    session.reporter.events.on("status", display.on_status)
    orchestrator = session.orchestrator
    try:
        action()
        display.start()
        while orchestrator.busy:
            display.update(session.tick())
            await asyncio.sleep(session.config.poll_interval)
    finally:
        display.stop()
        session.reporter.events.off("status", display.on_status)
        session.shutdown()

    outcome = orchestrator.last_outcome
    display.complete(outcome)
    return 0 if outcome is not None and outcome.success else 1


def _cmd_list(config: WorkshopConfig) -> int:
    store = PackageStore(config.content_root)
    rows = []
    for handle in store.list_packages():
        try:
            rows.append((handle, store.load(handle), None))
        except WorkshopError as exc:
            rows.append((handle, None, str(exc)))
    render_package_table(rows)
    return 0


def _cmd_validate(config: WorkshopConfig, name: str) -> int:
    store = PackageStore(config.content_root)
    record = store.load(store.handle_for(name))
    Validator.from_config(config).validate(record)
    print(f"{name}: OK")
    return 0


async def _cmd_create(config: WorkshopConfig, api: Optional[IRemotePublishingAPI], name: str) -> int:
    if api is None:
        handle = PackageStore(config.content_root).create(name)
        print(f"Created {handle.path}")
        return 0

    session = WorkshopSession(config, api)
    session.start()
    return await _drive(session, name, lambda: session.create_package(name))


async def _cmd_submit(config: WorkshopConfig, api: IRemotePublishingAPI, args: argparse.Namespace) -> int:
    session = WorkshopSession(config, api)
    session.start()
    session.select_package(session.store.handle_for(args.name))
    session.edit_active_fields(
        title=args.title,
        description=args.description,
        visibility=Visibility[args.visibility.upper()] if args.visibility else None,
        tags=args.tag,
    )
    return await _drive(session, args.name, lambda: session.submit_active(args.change_note))


def _add_api_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--api",
        default=None,
        help="Remote API factory as 'module:callable'; called with the config",
    )
    group.add_argument(
        "--dry-run",
        action="store_true",
        help="Use the in-process simulated workshop instead of a real API",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workshop-up",
        description="Manage workshop content packages and publish them.",
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to workshop.config.json")
    parser.add_argument(
        "--content-root",
        type=Path,
        default=None,
        help="Content root directory (default from WORKSHOP_CONTENT_ROOT or config)",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from this .env file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logs")
    parser.add_argument("--silent", action="store_true", help="Only print errors")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Explicit log level (DEBUG/INFO/WARNING/ERROR); falls back to $LOG_LEVEL",
    )
    parser.add_argument("--version", action="version", version=f"workshop-up {__version__}")

    commands = parser.add_subparsers(dest="command")
    commands.add_parser("list", help="List packages in the content root")

    create = commands.add_parser("create", help="Create a package (and its remote item with an API)")
    create.add_argument("name")
    _add_api_arguments(create)

    validate = commands.add_parser("validate", help="Run pre-submission checks")
    validate.add_argument("name")

    submit = commands.add_parser("submit", help="Publish a package")
    submit.add_argument("name")
    _add_api_arguments(submit)
    submit.add_argument("-m", "--change-note", default=None, help="Change note for this update")
    submit.add_argument("--title", default=None)
    submit.add_argument("--description", default=None)
    submit.add_argument(
        "--visibility",
        choices=[v.name.lower() for v in Visibility],
        default=None,
    )
    submit.add_argument("--tag", action="append", default=None, help="Tag (repeatable); replaces all tags")
    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    used_env_file = args.env_file or _resolve_default_env_file()
    if used_env_file is not None:
        try:
            _load_env_file(Path(used_env_file))
        except CLIError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1

    effective_log_mode = _setup_logging(
        debug=args.debug,
        silent=args.silent,
        log_level=args.log_level or os.getenv(LOG_LEVEL_ENV_VAR),
    )

    if args.command is None:
        parser.print_help()
        return 0

    try:
        config = load_config(args.config, content_root=args.content_root)
        api = _build_api(args, config) if args.command in {"create", "submit"} else None
        if args.command == "submit" and api is None:
            raise CLIError("submit needs --api MODULE:FACTORY or --dry-run")

        if args.command != "list":
            render_configuration_summary(
                {
                    "Command": args.command,
                    "Content Root": str(config.content_root),
                    "App ID": config.app_id or "(unset)",
                    "API": "dry-run" if getattr(args, "dry_run", False) else getattr(args, "api", None) or "-",
                    "Tag Validation": "on" if config.validate_tags else "off",
                    "Env File": str(used_env_file) if used_env_file else "-",
                    "Logging": effective_log_mode,
                }
            )

        if args.command == "list":
            return _cmd_list(config)
        if args.command == "validate":
            return _cmd_validate(config, args.name)
        if args.command == "create":
            return asyncio.run(_cmd_create(config, api, args.name))
        return asyncio.run(_cmd_submit(config, api, args))
    except (CLIError, WorkshopError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return 130


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
