#!/usr/bin/env python3
"""
Command-line time tracking with a local SQLite session log.
"""

import logging
import sys
from datetime import tzinfo
from typing import Callable, Optional

from .config import TockConfig, load_config
from .errors import TockError
from .store import SessionStore
from .timestamps import resolve_timezone

__version__ = "0.1.0"

log = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"
DATETIME_METAVAR = "DD.MM.YYYY HH:MM"

Handler = Callable[[TockConfig, SessionStore, Optional[tzinfo]], int]


def configure_logging(verbose: bool = False) -> None:
    """
    Configure root logging for CLI runs.

    Parameters
    ----------
    verbose : bool, optional
        Log debug messages when True; otherwise only warnings and errors.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def open_store(config: TockConfig) -> SessionStore:
    """
    Open the session store, creating the database on first use.

    Parameters
    ----------
    config : TockConfig
        Resolved settings.

    Returns
    -------
    SessionStore
        Store with the schema in place.
    """
    store = SessionStore(config.database_path)
    if store.ensure_schema():
        print(f"Database created at: {config.database_path}", file=sys.stderr)
    return store


def run_command(action: str, handler: Handler) -> int:
    """
    Load settings, open the store, and run a command handler.

    Parameters
    ----------
    action : str
        Command name used in error messages.
    handler : Handler
        Callable receiving the config, store, and display timezone.

    Returns
    -------
    int
        Exit code; 1 when the handler raised a ``TockError``.
    """
    try:
        config = load_config()
        tz = resolve_timezone(config.timezone)
        store = open_store(config)
        return handler(config, store, tz)
    except TockError as exc:
        log.debug("%s failed", action, exc_info=True)
        print(f"tock: {action} failed: {exc}", file=sys.stderr)
        return 1


def build_app():
    """
    Build the Typer app lazily to keep fast-path imports light.

    Returns
    -------
    typer.Typer
        Configured Typer application for the tock CLI.
    """
    import typer

    from . import commands
    from .periods import Period

    app = typer.Typer(help="Lightweight time tracking", no_args_is_help=True)

    @app.callback()
    def main_callback(
        verbose: bool = typer.Option(
            False,
            "--verbose",
            "-v",
            help="Log debug output to stderr.",
        ),
    ):
        configure_logging(verbose)

    @app.command("start")
    def start_cmd(
        topic: Optional[str] = typer.Argument(None, help="Topic to track."),
    ):
        exit_code = run_command(
            "start",
            lambda config, store, tz: commands.run_start(
                store, topic, default_topic=config.default_topic
            ),
        )
        raise typer.Exit(code=exit_code)

    @app.command("stop")
    def stop_cmd(
        topic: Optional[str] = typer.Argument(
            None,
            help="Only stop the active session if it has this topic.",
        ),
    ):
        exit_code = run_command(
            "stop",
            lambda config, store, tz: commands.run_stop(store, topic, tz=tz),
        )
        raise typer.Exit(code=exit_code)

    @app.command("show")
    def show_cmd(
        count: int = typer.Option(
            1,
            "--count",
            "-n",
            min=0,
            help="Number of sessions or periods to show.",
        ),
        period: Optional[Period] = typer.Option(
            None,
            "--period",
            "-p",
            case_sensitive=False,
            help="Aggregate hours per topic by day/week/month/year.",
        ),
    ):
        exit_code = run_command(
            "show",
            lambda config, store, tz: commands.run_show(store, count, period, tz=tz),
        )
        raise typer.Exit(code=exit_code)

    @app.command("list")
    def list_cmd(
        count: int = typer.Option(
            10,
            "--count",
            "-n",
            min=0,
            help="Maximum sessions to list.",
        ),
    ):
        exit_code = run_command(
            "list",
            lambda config, store, tz: commands.run_list(store, count, tz=tz),
        )
        raise typer.Exit(code=exit_code)

    @app.command("add")
    def add_cmd(
        topic: str = typer.Argument(..., help="Session topic."),
        start: str = typer.Option(
            ...,
            "--start",
            "-s",
            metavar=DATETIME_METAVAR,
            help="Start time.",
        ),
        end: str = typer.Option(
            ...,
            "--end",
            "-e",
            metavar=DATETIME_METAVAR,
            help="End time.",
        ),
    ):
        exit_code = run_command(
            "add",
            lambda config, store, tz: commands.run_add(store, topic, start, end, tz=tz),
        )
        raise typer.Exit(code=exit_code)

    @app.command("edit")
    def edit_cmd(
        session_id: int = typer.Argument(..., help="Session id to edit."),
        topic: Optional[str] = typer.Option(None, "--topic", "-t", help="New topic."),
        start: Optional[str] = typer.Option(
            None,
            "--start",
            "-s",
            metavar=DATETIME_METAVAR,
            help="New start time.",
        ),
        end: Optional[str] = typer.Option(
            None,
            "--end",
            "-e",
            metavar=DATETIME_METAVAR,
            help="New end time.",
        ),
    ):
        exit_code = run_command(
            "edit",
            lambda config, store, tz: commands.run_edit(
                store,
                session_id,
                topic=topic,
                start=start,
                end=end,
                tz=tz,
            ),
        )
        raise typer.Exit(code=exit_code)

    @app.command("delete")
    def delete_cmd(
        session_id: int = typer.Argument(..., help="Session id to delete."),
    ):
        exit_code = run_command(
            "delete",
            lambda config, store, tz: commands.run_delete(store, session_id),
        )
        raise typer.Exit(code=exit_code)

    @app.command("export")
    def export_cmd():
        exit_code = run_command(
            "export",
            lambda config, store, tz: commands.run_export(store, config.export_dir, tz=tz),
        )
        raise typer.Exit(code=exit_code)

    @app.command("reset")
    def reset_cmd(
        yes: bool = typer.Option(
            False,
            "--yes",
            "-y",
            help="Delete all data without asking for confirmation.",
        ),
    ):
        exit_code = run_command(
            "reset",
            lambda config, store, tz: commands.run_reset(store, assume_yes=yes),
        )
        raise typer.Exit(code=exit_code)

    return app


def main():
    """
    Entry point for the tock command.
    """
    app = build_app()
    app()


if __name__ == "__main__":
    main()
