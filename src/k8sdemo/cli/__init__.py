"""CLI commands for the k8sdemo service.

- k8sdemo serve: Run the API server
- k8sdemo seed: Insert the sample items into an empty database

Usage:
    k8sdemo --help
    k8sdemo serve --port 8080
    k8sdemo seed
"""

import typer

from k8sdemo.cli.seed import app as seed_app
from k8sdemo.cli.serve import app as serve_app

app = typer.Typer(
    name="k8sdemo",
    help="k8sdemo: cache-aside data service backed by Redis",
    no_args_is_help=True,
)

app.add_typer(serve_app, name="serve")
app.add_typer(seed_app, name="seed")


@app.callback()
def callback() -> None:
    """k8sdemo: cache-aside data service backed by Redis."""


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
