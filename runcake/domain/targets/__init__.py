"""Target resolution and cloud provider seam."""

from .models import CommandInvocation, CommandSubmission, InstanceInfo, ResolutionFailure
from .provider import CloudProvider, CloudProviderError, CloudProviderFactory
from .resolver import TargetResolver

__all__ = [
    "CloudProvider",
    "CloudProviderError",
    "CloudProviderFactory",
    "CommandInvocation",
    "CommandSubmission",
    "InstanceInfo",
    "ResolutionFailure",
    "TargetResolver",
]
