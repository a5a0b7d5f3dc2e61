"""CLI entry point for gh-proxy."""

import sys
from datetime import datetime

from rich.console import Console

from app import create_app
from core.config import CONFIG_FILE, load_config
from ui.dashboard import Dashboard
from ui.log_utils import clear_logs, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    config = load_config()

    # Handle CLI arguments
    args = sys.argv[1:]
    if args:
        arg = args[0]

        if arg == "--config":
            console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
            return

        if arg in ("--help", "-h"):
            _print_help()
            return

    try:
        overrides = _parse_overrides(args)
    except ValueError as e:
        console.print(f"[red][ERROR][/red] {e}")
        sys.exit(1)
    if overrides:
        config = config.model_copy(
            update={"proxy": config.proxy.model_copy(update=overrides)}
        )

    # Clear previous logs and start dashboard
    clear_logs()
    dashboard = Dashboard(config)

    import uvicorn

    app = create_app(config, dashboard)

    # Run with dashboard
    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="warning",
        timeout_keep_alive=config.limits.keep_alive_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    dashboard.start()
    start_time = datetime.now()
    write_cli_log("STARTUP", "Proxy started", host=config.proxy.host, port=config.proxy.port)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Proxy stopped", duration=str(duration))
        dashboard.stop()


def _parse_overrides(args: list[str]) -> dict:
    """Parse --host/--port overrides (not persisted to the config file)."""
    overrides = {}
    it = iter(args)
    for arg in it:
        if arg not in ("--host", "--port"):
            raise ValueError(f"Unknown argument: {arg}")
        value = next(it, None)
        if value is None:
            raise ValueError(f"Missing value for {arg}")
        if arg == "--port":
            if not value.isdigit():
                raise ValueError(f"Invalid port: {value}")
            overrides["port"] = int(value)
        else:
            overrides["host"] = value
    return overrides


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]GitHub Proxy[/bold cyan]

Forwards GitHub releases, archives, raw files, gists and git traffic.

[bold]Usage:[/bold]
    gh-proxy                       Start with live dashboard
    gh-proxy --host H --port N     Override listen address
    gh-proxy --config              Show config location
    gh-proxy --help                Show this help

[bold]Examples:[/bold]
    /github.com/<owner>/<repo>/releases/download/<tag>/<file>
    /raw.githubusercontent.com/<owner>/<repo>/<branch>/<file>
    /?q=github.com/<owner>/<repo>/archive/main.zip
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
