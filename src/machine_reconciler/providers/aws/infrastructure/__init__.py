"""AWS infrastructure - boto3 client wrapper."""

from .aws_client import AWSClient

__all__ = ["AWSClient"]
