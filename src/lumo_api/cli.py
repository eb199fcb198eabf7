"""Command line interface for lumo-api."""

from __future__ import annotations

import logging
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from pathlib import Path
from typing import Annotated, Any, Optional

import httpx
import typer

from .api.client import LumoAPIError, LumoClient
from .config import load_config
from .errors import BootstrapError
from .factory import build_credential_store, build_login_flow, build_notifier, build_orchestrator

app = typer.Typer(help="Lumo API: a request/response API in front of the Lumo chat UI")

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to YAML configuration."),
]
EnvFileOption = Annotated[
    Optional[Path],
    typer.Option("--env-file", help="Path to an .env file with default configuration values."),
]
AuthStateOption = Annotated[
    Optional[Path],
    typer.Option("--auth-state", help="File holding the saved browser authentication state."),
]


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Configure logging before executing any command."""

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@app.command()
def version() -> None:
    """Print the package version."""

    try:
        typer.echo(get_version("lumo-api"))
    except PackageNotFoundError:  # pragma: no cover - when running from source tree
        typer.echo("0.0.0")


@app.command()
def serve(
    config_path: ConfigOption = None,
    env_file: EnvFileOption = None,
    host: Annotated[
        Optional[str],
        typer.Option("--host", help="Binding address for the HTTP API."),
    ] = None,
    port: Annotated[
        Optional[int],
        typer.Option("--port", help="HTTP port for the API."),
    ] = None,
    auth_state: AuthStateOption = None,
    headless: Annotated[
        Optional[bool],
        typer.Option("--headless/--headed", help="Run the serving browser headless (or headed)."),
    ] = None,
    interactive_login: Annotated[
        Optional[bool],
        typer.Option(
            "--interactive-login/--no-interactive-login",
            help="Allow blocking on a human login when no auth state is saved.",
        ),
    ] = None,
) -> None:
    """Start the browser session and serve the HTTP API."""

    overrides: dict[str, Any] = {}
    if host is not None or port is not None:
        overrides.setdefault("server", {})
        if host is not None:
            overrides["server"]["host"] = host
        if port is not None:
            overrides["server"]["port"] = port
    if auth_state is not None:
        overrides["auth_state_path"] = str(auth_state)
    if headless is not None:
        overrides["browser"] = {"headless": headless}
    if interactive_login is not None:
        overrides["login"] = {"interactive": interactive_login}

    config = load_config(config_path, env_file=env_file, **overrides)
    orchestrator = build_orchestrator(config)
    try:
        try:
            orchestrator.bootstrap()
        except BootstrapError as exc:
            typer.echo(f"Failed to start browser session: {exc}", err=True)
            raise typer.Exit(code=1) from exc

        import uvicorn

        from .api.service import create_app

        typer.echo(
            f"Lumo API listening on http://{config.server.host}:{config.server.port}/v1/prompt"
        )
        uvicorn.run(
            create_app(orchestrator, config.server),
            host=config.server.host,
            port=config.server.port,
        )
    finally:
        orchestrator.shutdown()


@app.command()
def login(
    config_path: ConfigOption = None,
    env_file: EnvFileOption = None,
    auth_state: AuthStateOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", help="Replace an existing saved authentication state."),
    ] = False,
) -> None:
    """Log in interactively once and save the authentication state."""

    overrides: dict[str, Any] = {}
    if auth_state is not None:
        overrides["auth_state_path"] = str(auth_state)
    config = load_config(config_path, env_file=env_file, **overrides)
    store = build_credential_store(config)
    if store.exists() and not force:
        typer.echo(f"Authentication state already saved at {store.path}; use --force to replace it.")
        raise typer.Exit(code=1)

    flow = build_login_flow(config, build_notifier())
    try:
        state = flow.run()
    except BootstrapError as exc:
        typer.echo(f"Login failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    if not store.save(state):
        typer.echo(f"Could not write {store.path}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Authentication state saved to {store.path}")


@app.command()
def ask(
    prompt: Annotated[str, typer.Argument(help="Prompt to send to the assistant.")],
    url: Annotated[
        str,
        typer.Option("--url", help="Base URL of a running lumo-api server."),
    ] = "http://127.0.0.1:8080",
    web_search: Annotated[
        bool,
        typer.Option("--web-search/--no-web-search", help="Enable the assistant's web search."),
    ] = False,
    timeout: Annotated[
        Optional[int],
        typer.Option("--timeout", help="Seconds the server may wait for the answer."),
    ] = None,
) -> None:
    """Send a prompt to a running server and print the answer."""

    client = LumoClient(url)
    try:
        answer = client.prompt(prompt, web_search=web_search, timeout=timeout)
    except LumoAPIError as exc:
        typer.echo(f"Error: {exc.message}", err=True)
        raise typer.Exit(code=1) from exc
    except httpx.HTTPError as exc:
        typer.echo(f"Error: cannot reach {url}: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(answer)


if __name__ == "__main__":
    app()
