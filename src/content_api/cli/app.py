"""``content-api`` command line: run the API server, migrate, inspect resources."""

import typer

from content_api.core.config import get_settings
from content_api.core.logging import setup_logging

app = typer.Typer(name="content-api", help="Content dashboard resource management CLI")


@app.callback()
def _configure() -> None:
    """Configure logging from settings before any subcommand runs."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir, json_logs=settings.log_json)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
    port: int = typer.Option(8000, "--port", help="Port to bind"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes (development only)"),
) -> None:
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("content_api.main:create_app", factory=True, host=host, port=port, reload=reload)


def _register_subcommands() -> None:
    from content_api.cli.db_cmd import db_app
    from content_api.cli.resources_cmd import resources_app

    app.add_typer(db_app, name="db", help="Database migration commands")
    app.add_typer(resources_app, name="resources", help="List resources and show statistics")


_register_subcommands()
