"""CLI entry point for floristone-proxy."""

import sys
from datetime import datetime

from rich.console import Console

from app import create_app
from auth import check_auth, mask
from core.config import Config, load_config
from core.exceptions import ConfigurationError
from ui.dashboard import Dashboard, HeadlessLogger
from ui.log_utils import CLI_LOG_FILE, clear_logs, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    try:
        config = load_config()
    except ConfigurationError as e:
        console.print(f"[red][ERROR][/red] {e}")
        sys.exit(1)

    args = sys.argv[1:]

    if "--check" in args:
        check_auth(config.credentials)
        return

    if "--config" in args:
        _print_config(config)
        return

    if "--help" in args or "-h" in args:
        _print_help()
        return

    # Missing credentials are reported per request with a 500
    if not config.credentials.is_complete:
        console.print("[yellow]Warning:[/yellow] F1_API_KEY / F1_API_PASSWORD not set")
        console.print("[dim]Requests will be answered with 500 until they are configured[/dim]")

    import uvicorn

    clear_logs()
    headless = "--headless" in args
    dashboard = None if headless else Dashboard(config)
    app = create_app(config, HeadlessLogger() if headless else dashboard)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="info" if headless else "warning",
    )
    server = uvicorn.Server(uvicorn_config)

    if dashboard:
        dashboard.start()
    start_time = datetime.now()
    write_cli_log("STARTUP", "Proxy started", port=config.proxy.port)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Proxy stopped", duration=str(duration))
        if dashboard:
            dashboard.stop()


def _print_config(config: Config) -> None:
    """Print the effective configuration with secrets masked."""
    proxy = config.proxy
    console.print(f"[bold]Listen:[/bold] http://{proxy.host}:{proxy.port}{proxy.mount_prefix}")
    console.print(f"[bold]Timeout:[/bold] {proxy.timeout}s per hop")
    for api, base in config.upstreams.as_mapping().items():
        console.print(f"[bold]Upstream {api}:[/bold] {base}")
    console.print(f"[bold]Allowed origins:[/bold] {', '.join(config.cors.allowed_origins)}")
    key = config.credentials.api_key
    console.print(f"[bold]API key:[/bold] {mask(key) if key else '[red]not set[/red]'}")
    console.print(f"[bold]Log file:[/bold] {CLI_LOG_FILE}")


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]Florist One Proxy[/bold cyan]

Forwards browser requests to the Florist One API with server-side credentials
and CORS headers.

[bold]Usage:[/bold]
    floristone-proxy              Start with live dashboard
    floristone-proxy --headless   Start without dashboard (file log only)
    floristone-proxy --check      Check credentials
    floristone-proxy --config     Show effective configuration
    floristone-proxy --help       Show this help

[bold]Environment:[/bold]
    F1_API_KEY, F1_API_PASSWORD            Upstream Basic-Auth credentials (required)
    F1_FLOWERSHOP_BASE, F1_TREE_BASE,
    F1_CART_BASE                           Upstream base URLs
    ALLOWED_ORIGINS                        Comma-separated CORS allowlist
    PROXY_HOST, PROXY_PORT,
    PROXY_MOUNT_PREFIX, PROXY_TIMEOUT      Listener and timeout settings
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
