"""
State Storage Module
Creates S3 bucket, DynamoDB table and optional KMS key for a remote state backend
"""

from .functions import (
    StateBackendDeclaration,
    backend_settings,
    compose,
    create_state_storage_resources,
    get_backend_configuration_commands,
    get_validation_commands,
    render_backend_hcl,
)

__all__ = [
    "StateBackendDeclaration",
    "backend_settings",
    "compose",
    "create_state_storage_resources",
    "get_backend_configuration_commands",
    "get_validation_commands",
    "render_backend_hcl",
]
