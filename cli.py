"""CLI entry point for openai-stealth-proxy."""

import sys
from datetime import datetime

from rich.console import Console

from app import create_app
from core.config import Config, load_config, unset_variables
from core.credentials import ApiKey
from core.exceptions import ConfigurationError
from ui.dashboard import Dashboard, HeadlessLogger
from ui.log_utils import clear_logs, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    args = sys.argv[1:]

    if "--help" in args or "-h" in args:
        _print_help()
        return

    try:
        config = load_config()
    except ConfigurationError as e:
        console.print(f"[red][ERROR][/red] {e}")
        sys.exit(1)

    if "--no-dashboard" in args:
        config.logging.dashboard = False

    if "--config" in args:
        _print_config(config)
        return

    log_root = config.logging.log_dir
    for name in unset_variables():
        write_cli_log("CONFIG", f"{name} not set, using default", log_root=log_root)

    clear_logs(log_root)
    dashboard = Dashboard(config) if config.logging.dashboard else None
    logger = dashboard or HeadlessLogger(config)

    import uvicorn

    app = create_app(config, logger)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="warning",
        timeout_keep_alive=config.limits.idle_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    if dashboard:
        dashboard.start()
    else:
        console.print(
            f"Forwarding [bold]{config.proxy.host}:{config.proxy.port}/v1[/bold]"
            f" -> [bold]{config.upstream.base_url}[/bold]"
        )
    start_time = datetime.now()
    write_cli_log(
        "STARTUP",
        "Proxy started",
        log_root=log_root,
        port=config.proxy.port,
        upstream=config.upstream.base_url,
    )
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Proxy stopped", log_root=log_root, duration=str(duration))
        if dashboard:
            dashboard.stop()


def _print_config(config: Config):
    """Print the effective configuration."""
    data = config.model_dump(mode="json")
    data["upstream"]["api_key"] = ApiKey(config.upstream.api_key).label
    for section, values in data.items():
        console.print(f"[bold]{section}[/bold]")
        for key, value in values.items():
            console.print(f"  {key}: {value}")


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]OpenAI Stealth Proxy[/bold cyan]

Forwards /v1/* to an OpenAI-compatible upstream with a synthetic client identity.
Any other path answers 200 OK (health check).

[bold]Usage:[/bold]
    openai-stealth-proxy                  Start with live dashboard
    openai-stealth-proxy --no-dashboard   Start without the dashboard
    openai-stealth-proxy --config         Show effective configuration
    openai-stealth-proxy --help           Show this help

[bold]Environment:[/bold]
    OPENAI_URL       Upstream base URL (default https://api.deepinfra.com/v1/openai)
    OPENAI_API_KEY   Bearer token attached upstream (default unset)
    PORT / HOST      Listen address (default 0.0.0.0:8080)
    FAKE_IP_CIDR     Block for synthetic X-Real-IP (default 32.250.0.0/14)
    INJECT_REAL_IP   Set X-Real-IP upstream (default true)
    CONNECT_TIMEOUT, READ_TIMEOUT, WRITE_TIMEOUT, IDLE_TIMEOUT   Seconds
    LOG_DIR          Log directory (default ./logs)
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
