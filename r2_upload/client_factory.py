"""
R2 Client Factory Module
Provides boto3 S3 client creation for Cloudflare R2 and other S3-compatible stores.
"""

import logging

import boto3
from botocore.config import Config

from .config import UploadConfig

# botocore's own retries stay on; part retries are handled by PartUploader
CLIENT_MAX_ATTEMPTS = 3


def create_r2_client(config: UploadConfig, max_pool_connections: int = 10):
    """
    Create a boto3 S3 client pointed at the configured R2 endpoint.

    Args:
        config: Upload configuration with credentials and endpoint
        max_pool_connections: Size of the HTTP connection pool shared by part threads

    Returns:
        boto3.client: Configured S3 client
    """
    endpoint = config.resolved_endpoint()
    client_config = Config(
        signature_version="s3v4",
        max_pool_connections=max_pool_connections,
        retries={"max_attempts": CLIENT_MAX_ATTEMPTS, "mode": "standard"},
    )
    logging.debug("Creating S3 client for %s (region %s)", endpoint, config.region)
    return boto3.client(
        "s3",
        endpoint_url=endpoint,
        region_name=config.region,
        aws_access_key_id=config.access_key_id,
        aws_secret_access_key=config.secret_access_key,
        config=client_config,
    )


def close_client(client) -> None:
    """Release the client's connection pool at the end of a run."""
    close = getattr(client, "close", None)
    if callable(close):
        close()


def generate_signed_url(client, bucket: str, key: str, expires_in: int) -> str:
    """Return a time-limited GET URL for an uploaded object."""
    return client.generate_presigned_url(
        "get_object",
        Params={"Bucket": bucket, "Key": key},
        ExpiresIn=expires_in,
    )
