"""
Pulumi modules for a remote state backend
S3 bucket for state, DynamoDB table for locking, optional KMS key for both
"""

from .config import ModuleInput, ValidationError, get_config
from .state_storage import compose, create_state_storage_resources

__all__ = [
    "ModuleInput",
    "ValidationError",
    "compose",
    "create_state_storage_resources",
    "get_config",
]
