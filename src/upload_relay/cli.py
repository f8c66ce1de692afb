# cli.py
import asyncio
import logging

import click

from upload_relay.config.settings import get_settings
from upload_relay.form import FormStatus, UploadForm

# Configure logging
logger = logging.getLogger(__name__)


@click.group()
def cli():
    """CLI commands for the upload relay server and client"""
    pass


@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    click.echo("Current Configuration:")
    click.echo(f"  Storage Backend: {settings.storage_backend}")
    click.echo(f"  S3 Bucket: {settings.s3_bucket_name}")
    click.echo(f"  AWS Region: {settings.aws_region}")
    click.echo(f"  AWS Endpoint: {settings.aws_endpoint_url}")
    click.echo(f"  Drive Folder: {settings.drive_folder_id}")
    click.echo(f"  Storage Dir: {settings.storage_dir}")
    click.echo(f"  Ledger File: {settings.ledger_file_name}")
    click.echo(f"  Max Upload Bytes: {settings.max_upload_bytes}")
    click.echo(f"  Frontend URL: {settings.frontend_url}")
    click.echo(f"  Backend URL: {settings.backend_url}")


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Interface to bind")
@click.option("--port", default=3001, show_default=True, type=int, help="Port to listen on")
def serve(host, port):
    """Run the upload API with uvicorn"""
    import uvicorn

    from upload_relay.main import create_app

    uvicorn.run(create_app(get_settings()), host=host, port=port)


@cli.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--name", "user_name", required=True, help="Name of the uploader")
@click.option("--url", default=None, help="Base URL of the upload API (defaults to BACKEND_URL)")
def upload(file_path, user_name, url):
    """Upload FILE_PATH, retrying failed attempts"""
    form = UploadForm(
        url or get_settings().backend_url,
        on_success=lambda result: click.echo(f"Stored as {result.get('fileId')}"),
    )
    if form.select_file(file_path):
        form.set_user_name(user_name)
        asyncio.run(form.submit())

    click.echo(form.state.message)
    if form.state.status != FormStatus.SUCCESS:
        raise SystemExit(1)


if __name__ == "__main__":
    cli()
