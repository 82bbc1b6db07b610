"""AWS-backed implementations of the cloud provider protocol."""

from .provider import Boto3CloudProvider, cloud_provider_factory

__all__ = ["Boto3CloudProvider", "cloud_provider_factory"]
