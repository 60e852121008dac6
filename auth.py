"""Basic-Auth credentials for the Florist One API."""

import base64

from rich.console import Console

from core.config import CredentialSettings, load_config
from core.exceptions import MissingCredentialsError

console = Console()


def basic_auth_value(credentials: CredentialSettings) -> str:
    """Return the `Authorization` header value for the configured key/password."""
    if not credentials.is_complete:
        raise MissingCredentialsError("F1_API_KEY and F1_API_PASSWORD must both be set")
    raw = f"{credentials.api_key}:{credentials.api_password}".encode()
    return "Basic " + base64.b64encode(raw).decode("ascii")


def mask(value: str) -> str:
    if len(value) <= 8:
        return "***"
    return value[:4] + "..." + value[-2:]


def check_auth(credentials: CredentialSettings) -> bool:
    """Print whether upstream credentials are configured."""
    if credentials.is_complete:
        console.print(f"[green]Credentials configured[/green] (key {mask(credentials.api_key)})")
        return True

    missing = [
        name
        for name, value in (
            ("F1_API_KEY", credentials.api_key),
            ("F1_API_PASSWORD", credentials.api_password),
        )
        if not value
    ]
    console.print(f"[yellow]Missing credentials:[/yellow] {', '.join(missing)}")
    console.print("\n[dim]Export them before starting the proxy:[/dim]")
    console.print("  export F1_API_KEY=... F1_API_PASSWORD=...")
    return False


def print_auth_status() -> None:
    """CLI entry point for credential check."""
    check_auth(load_config().credentials)


if __name__ == "__main__":
    print_auth_status()
