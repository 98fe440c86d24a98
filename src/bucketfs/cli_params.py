"""Shared CLI parameter definitions.

Every command talks to S3 the same way, so the connection options are
declared once here as typed annotations and reused in each signature.
"""

from typing import Annotated, Optional

import typer

S3PathArgument = Annotated[
    str, typer.Argument(help="Path in the form s3://bucket/path")
]

AccessKeyIdOption = Annotated[
    Optional[str],
    typer.Option("--access-key-id", help="AWS access key ID"),
]

SecretAccessKeyOption = Annotated[
    Optional[str],
    typer.Option("--secret-access-key", help="AWS secret access key"),
]

SessionTokenOption = Annotated[
    Optional[str],
    typer.Option("--session-token", help="AWS session token"),
]

RegionOption = Annotated[str, typer.Option("--region", help="AWS region name")]

EndpointUrlOption = Annotated[
    Optional[str], typer.Option("--endpoint-url", help="Custom S3 endpoint URL")
]

AwsProfileOption = Annotated[
    Optional[str], typer.Option("--aws-profile", help="AWS CLI profile name")
]

MaxItemsOption = Annotated[
    int,
    typer.Option("--max-items", help="Listing page size (0 for the default)"),
]
