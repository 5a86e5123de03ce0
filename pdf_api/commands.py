"""Maintenance commands exposed through ``flask --app app <command>``."""

from __future__ import annotations

import click
from flask import Flask

from pdf_api.database import current_handle
from pdf_api.errors import NotFound, ValidationError
from pdf_api.services import auth_service
from pdf_api.services.document_service import DocumentService


def register_commands(app: Flask) -> None:
    """Attach user and storage maintenance commands to the app CLI."""

    @app.cli.command("create-user")
    @click.argument("email")
    @click.password_option()
    def create_user(email: str, password: str) -> None:
        """Register a user that can log in to upload PDFs."""
        try:
            auth_service.create_user(current_handle().require_db(), email, password)
        except ValidationError as exc:
            raise click.ClickException(exc.message) from exc
        click.echo(f"Created user {email}")

    @app.cli.command("purge-pdf")
    @click.confirmation_option(prompt="Delete the stored PDF?")
    def purge_pdf() -> None:
        """Delete every stored version of the PDF."""
        service = DocumentService(current_handle().require_store())
        try:
            removed = service.remove()
        except NotFound:
            click.echo("No PDF stored.")
            return
        click.echo(f"Deleted {removed} stored version(s).")

    @app.cli.command("prune-pdf")
    def prune_pdf() -> None:
        """Remove superseded versions left behind by interrupted uploads."""
        removed = DocumentService(current_handle().require_store()).prune()
        click.echo(f"Pruned {removed} old version(s).")

    @app.cli.command("cleanup-sessions")
    def cleanup_sessions() -> None:
        """Drop expired login sessions."""
        removed = auth_service.cleanup_expired_sessions(current_handle().require_db())
        click.echo(f"Removed {removed} expired session(s).")
