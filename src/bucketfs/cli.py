"""Command-line interface for bucketfs.

Commands:
    - ls: List a directory
    - cat: Print an object's content
    - put: Write a local file (or literal text) to a path
    - mkdir: Create a directory marker
    - rm: Remove every key under a path
    - mv: Rename an object
    - stat: Describe an object

Paths are given as s3://bucket/path.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from . import __version__
from .cli_params import (
    AccessKeyIdOption,
    AwsProfileOption,
    EndpointUrlOption,
    MaxItemsOption,
    RegionOption,
    S3PathArgument,
    SecretAccessKeyOption,
    SessionTokenOption,
)
from .core.exceptions import ValidationError
from .filesystem import BucketFS, list_directory
from .objectstorage import S3ClientConfig, S3ClientManager, S3ObjectStore

app = typer.Typer(
    name="bucketfs",
    help="Browse and edit an S3 bucket as a filesystem.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        typer.echo(f"bucketfs {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, help="Show version."),
    ] = None,
) -> None:
    """
    bucketfs: files and directories on top of S3 object storage.
    """
    pass


def _open_fs(
    s3_path: str,
    access_key_id: Optional[str] = None,
    secret_access_key: Optional[str] = None,
    session_token: Optional[str] = None,
    region_name: str = "us-east-1",
    endpoint_url: Optional[str] = None,
    aws_profile: Optional[str] = None,
) -> tuple[BucketFS, str]:
    """Build a filesystem for the bucket named in s3_path."""
    bucket, path = S3ClientManager.parse_s3_path(s3_path)
    config = S3ClientConfig(
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        session_token=session_token,
        region_name=region_name,
        endpoint_url=endpoint_url,
        aws_profile=aws_profile,
    )
    return BucketFS(bucket, S3ObjectStore.from_config(config)), path


@app.command("ls")
def ls_cmd(
    path: S3PathArgument,
    max_items: MaxItemsOption = 0,
    access_key_id: AccessKeyIdOption = None,
    secret_access_key: SecretAccessKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = "us-east-1",
    endpoint_url: EndpointUrlOption = None,
    aws_profile: AwsProfileOption = None,
) -> None:
    """
    List the entries of a directory.

    Example:
        bucketfs ls s3://bucket/data/ --aws-profile myprofile
    """
    try:
        fs, dir_path = _open_fs(
            path,
            access_key_id,
            secret_access_key,
            session_token,
            region_name,
            endpoint_url,
            aws_profile,
        )
        entries = list_directory(fs.store, fs.bucket, dir_path, max_items)

        if not entries:
            typer.echo("No entries found.")
            return
        for entry in entries:
            if entry.is_dir:
                typer.echo(f"{'DIR':>12}  {entry.name}/")
            else:
                modified = entry.mod_time.strftime("%Y-%m-%d %H:%M:%S")
                typer.echo(f"{entry.size:>12,}  {entry.name}  {modified}")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("cat")
def cat_cmd(
    path: S3PathArgument,
    access_key_id: AccessKeyIdOption = None,
    secret_access_key: SecretAccessKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = "us-east-1",
    endpoint_url: EndpointUrlOption = None,
    aws_profile: AwsProfileOption = None,
) -> None:
    """Print the content of an object."""
    try:
        fs, file_path = _open_fs(
            path,
            access_key_id,
            secret_access_key,
            session_token,
            region_name,
            endpoint_url,
            aws_profile,
        )
        with fs.open(file_path) as f:
            typer.echo(f.read(), nl=False)

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("put")
def put_cmd(
    path: S3PathArgument,
    source: Annotated[
        Optional[Path],
        typer.Option("--file", "-f", help="Local file to upload", exists=True),
    ] = None,
    text: Annotated[
        Optional[str], typer.Option("--text", help="Literal content to write")
    ] = None,
    access_key_id: AccessKeyIdOption = None,
    secret_access_key: SecretAccessKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = "us-east-1",
    endpoint_url: EndpointUrlOption = None,
    aws_profile: AwsProfileOption = None,
) -> None:
    """
    Create (or replace) a file.

    Examples:
        bucketfs put s3://bucket/notes.txt --text "hello"
        bucketfs put s3://bucket/data.csv --file ./data.csv
    """
    try:
        if (source is None) == (text is None):
            raise ValidationError("Exactly one of --file or --text is required")
        payload = source.read_bytes() if source is not None else text.encode("utf-8")

        fs, file_path = _open_fs(
            path,
            access_key_id,
            secret_access_key,
            session_token,
            region_name,
            endpoint_url,
            aws_profile,
        )
        with fs.create(file_path) as f:
            written = f.write(payload)
        typer.echo(f"Wrote {written:,} bytes to {path}")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("mkdir")
def mkdir_cmd(
    path: S3PathArgument,
    access_key_id: AccessKeyIdOption = None,
    secret_access_key: SecretAccessKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = "us-east-1",
    endpoint_url: EndpointUrlOption = None,
    aws_profile: AwsProfileOption = None,
) -> None:
    """Create a directory marker."""
    try:
        fs, dir_path = _open_fs(
            path,
            access_key_id,
            secret_access_key,
            session_token,
            region_name,
            endpoint_url,
            aws_profile,
        )
        fs.mkdir_all(dir_path.lstrip("/"))
        typer.echo(f"Created {path}")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("rm")
def rm_cmd(
    path: S3PathArgument,
    access_key_id: AccessKeyIdOption = None,
    secret_access_key: SecretAccessKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = "us-east-1",
    endpoint_url: EndpointUrlOption = None,
    aws_profile: AwsProfileOption = None,
) -> None:
    """Remove every key under a path."""
    try:
        fs, target = _open_fs(
            path,
            access_key_id,
            secret_access_key,
            session_token,
            region_name,
            endpoint_url,
            aws_profile,
        )
        fs.remove_all(target)
        typer.echo(f"Removed {path}")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("mv")
def mv_cmd(
    source: Annotated[str, typer.Argument(help="Current path, s3://bucket/path")],
    destination: Annotated[str, typer.Argument(help="New path in the same bucket")],
    access_key_id: AccessKeyIdOption = None,
    secret_access_key: SecretAccessKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = "us-east-1",
    endpoint_url: EndpointUrlOption = None,
    aws_profile: AwsProfileOption = None,
) -> None:
    """Rename an object within a bucket."""
    try:
        fs, old_path = _open_fs(
            source,
            access_key_id,
            secret_access_key,
            session_token,
            region_name,
            endpoint_url,
            aws_profile,
        )
        dest_bucket, new_path = S3ClientManager.parse_s3_path(destination)
        if dest_bucket != fs.bucket:
            raise ValidationError("Source and destination must be in the same bucket")

        fs.rename(old_path, new_path)
        typer.echo(f"Moved {source} -> {destination}")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("stat")
def stat_cmd(
    path: S3PathArgument,
    access_key_id: AccessKeyIdOption = None,
    secret_access_key: SecretAccessKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = "us-east-1",
    endpoint_url: EndpointUrlOption = None,
    aws_profile: AwsProfileOption = None,
) -> None:
    """Describe an object."""
    try:
        fs, file_path = _open_fs(
            path,
            access_key_id,
            secret_access_key,
            session_token,
            region_name,
            endpoint_url,
            aws_profile,
        )
        info = fs.stat(file_path)

        typer.echo(f"Name: {info.name}")
        typer.echo(f"Size: {info.size:,} bytes")
        typer.echo(f"Modified: {info.mod_time.isoformat()}")
        typer.echo(f"Directory: {info.is_dir}")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
