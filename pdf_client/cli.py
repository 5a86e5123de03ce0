"""Command line front end for the PDF client."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click
import requests
from dotenv import load_dotenv

from pdf_client.api import ApiClient
from pdf_client.local_storage import LocalStorage
from pdf_client.session import SessionContext
from pdf_client.upload import FileHandle, UploadController, UploadState


def _navigate(route: str) -> None:
    click.echo(f"Signed out. Run `pdf-client login` to continue ({route}).")


@click.group()
@click.option("--api-url", envvar="PDF_API_URL", default=None, help="Base URL of the PDF API.")
@click.option("--storage", "storage_path", envvar="PDF_CLIENT_STORAGE", default=None, type=click.Path())
@click.pass_context
def cli(ctx: click.Context, api_url: Optional[str], storage_path: Optional[str]) -> None:
    """Upload and fetch the shared PDF."""
    storage = LocalStorage(storage_path)
    api = ApiClient(storage, base_url=api_url)
    ctx.obj = SessionContext(api, storage, navigate=_navigate)


@cli.command()
@click.option("--email", prompt=True)
@click.password_option(confirmation_prompt=False)
@click.pass_obj
def login(session: SessionContext, email: str, password: str) -> None:
    """Log in and remember the access token."""
    try:
        session.login({"email": email, "password": password})
    except requests.RequestException as exc:
        raise click.ClickException(f"Login failed: {exc}") from exc
    click.echo("Logged in.")


@cli.command()
@click.pass_obj
def logout(session: SessionContext) -> None:
    """Forget the stored access token."""
    session.logout()


@cli.command()
@click.pass_obj
def status(session: SessionContext) -> None:
    """Show whether a token is stored."""
    click.echo("authenticated" if session.check_auth() else "unauthenticated")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def upload(session: SessionContext, file: Path) -> None:
    """Upload FILE as the current PDF."""
    controller = UploadController(session.api)
    if not controller.select_file(FileHandle.from_path(file)):
        raise click.ClickException(controller.message)

    controller.upload()
    if controller.state is not UploadState.SUCCESS:
        raise click.ClickException(controller.message)
    click.echo(controller.message)


@cli.command()
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.pass_obj
def fetch(session: SessionContext, output: Optional[Path]) -> None:
    """Download the current PDF."""
    try:
        data, filename = session.api.fetch_pdf()
    except requests.HTTPError as exc:
        if exc.response is not None and exc.response.status_code == 404:
            raise click.ClickException("No PDF stored.") from exc
        raise click.ClickException(f"Download failed: {exc}") from exc

    target = output or Path(filename)
    target.write_bytes(data)
    click.echo(f"Saved {len(data)} bytes to {target}")


@cli.command()
@click.pass_obj
def delete(session: SessionContext) -> None:
    """Delete the stored PDF."""
    try:
        result = session.api.delete_pdf()
    except requests.HTTPError as exc:
        if exc.response is not None and exc.response.status_code == 404:
            raise click.ClickException("No PDF stored.") from exc
        raise click.ClickException(f"Delete failed: {exc}") from exc
    click.echo(result.get("message", "Deleted."))


def main() -> None:
    load_dotenv()
    cli()


if __name__ == "__main__":
    main()
