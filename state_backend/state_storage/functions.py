"""
State Storage Module Functions
Composes the bucket, lock table and optional key into one remote state backend
and renders the backend configuration that points at it
"""

from dataclasses import asdict, dataclass
import json
from typing import Any, Dict, List

import pulumi

from ..config import ModuleInput
from ..encryption import EncryptionMode, EncryptionPlan, create_kms_key, plan_encryption
from ..lock_table import TableDeclaration, create_lock_table, declare_lock_table
from ..naming import ResourceNames, resource_names
from ..state_bucket import BucketDeclaration, create_state_bucket, declare_bucket


@dataclass(frozen=True)
class StateBackendDeclaration:
    """Everything the backend consists of, before any provider call"""

    names: ResourceNames
    encryption: EncryptionPlan
    bucket: BucketDeclaration
    table: TableDeclaration
    backend: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)


def backend_settings(module_input: ModuleInput) -> Dict[str, Any]:
    """
    Settings of an S3 backend using the declared bucket and lock table

    kms_key_id is not included; it is only known once the key exists and is
    added by create_state_storage_resources.
    """
    names = resource_names(module_input)
    return {
        "bucket": names.bucket,
        "key": module_input.state_key,
        "region": module_input.region,
        "dynamodb_table": names.table,
        "encrypt": True,
    }


def compose(module_input: ModuleInput) -> StateBackendDeclaration:
    """
    Declare the whole state backend for a validated input

    Args:
        module_input: Validated module input

    Returns:
        StateBackendDeclaration; identical input gives an identical declaration
    """
    plan = plan_encryption(module_input)
    return StateBackendDeclaration(
        names=resource_names(module_input),
        encryption=plan,
        bucket=declare_bucket(module_input, plan),
        table=declare_lock_table(module_input, plan),
        backend=backend_settings(module_input),
    )


def _hcl_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return json.dumps(str(value))


def render_backend_hcl(settings: Dict[str, Any]) -> str:
    """
    Render backend settings as a terraform backend block

    Args:
        settings: Backend settings with concrete (already resolved) values

    Returns:
        terraform { backend "s3" { ... } } block, keys sorted and aligned
    """
    width = max(len(key) for key in settings)
    lines = ["terraform {", '  backend "s3" {']
    for key in sorted(settings):
        lines.append(f"    {key.ljust(width)} = {_hcl_value(settings[key])}")
    lines.extend(["  }", "}", ""])
    return "\n".join(lines)


def get_backend_configuration_commands(settings: Dict[str, Any]) -> List[str]:
    """
    Get commands to configure a project to use the backend

    Args:
        settings: Backend settings from backend_settings

    Returns:
        List of configuration commands
    """
    init_flags = " ".join(
        f"-backend-config={key}={str(settings[key]).lower() if isinstance(settings[key], bool) else settings[key]}"
        for key in ("bucket", "key", "region", "dynamodb_table", "encrypt")
    )
    commands = [
        "# Configure Terraform to use the S3 backend:",
        f"terraform init {init_flags}",
    ]
    if "kms_key_id" in settings:
        commands.append("# Add -backend-config=kms_key_id=<kms_key_arn output> to encrypt state with the state key")
    commands.extend([
        "",
        "# Or point Pulumi at the bucket:",
        f"export PULUMI_BACKEND_URL=s3://{settings['bucket']}",
        "",
        "# Raise the engine log verbosity when troubleshooting:",
        "export TF_LOG=DEBUG",
        "",
        "# Note: Ensure AWS credentials are configured before running these commands",
    ])
    return commands


def get_validation_commands(settings: Dict[str, Any]) -> List[str]:
    """Get commands to validate the state storage setup"""
    return [
        "# Validate S3 bucket:",
        f"aws s3 ls s3://{settings['bucket']}/",
        f"aws s3api get-bucket-encryption --bucket {settings['bucket']}",
        "",
        "# Validate DynamoDB table:",
        f"aws dynamodb describe-table --table-name {settings['dynamodb_table']} --region {settings['region']}",
    ]


def create_state_storage_resources(module_input: ModuleInput) -> Dict[str, Any]:
    """
    Create complete state storage infrastructure

    Args:
        module_input: Validated module input

    Returns:
        Dict with all state storage outputs; keys starting with an underscore
        hold the underlying resources
    """
    declaration = compose(module_input)
    protect = module_input.protect_resources

    pulumi.log.info(
        f"Setting up remote state backend: bucket={declaration.names.bucket} "
        f"table={declaration.names.table} encryption={declaration.encryption.mode.value} "
        f"lifecycle_rules={len(declaration.bucket.lifecycle_rules)}"
    )
    if module_input.force_destroy and module_input.group == "prod":
        pulumi.log.warn(f"force_destroy is enabled on production state bucket {declaration.names.bucket}")

    key_result = create_kms_key(declaration.encryption, protect=protect)
    bucket_result = create_state_bucket(declaration.bucket, key_result["key_arn"], protect=protect)
    table_result = create_lock_table(declaration.table, key_result["key_arn"], protect=protect)

    settings = dict(declaration.backend)
    if declaration.encryption.mode is EncryptionMode.KMS:
        settings["kms_key_id"] = key_result["key_arn"]

    backend_config_hcl = pulumi.Output.all(**settings).apply(render_backend_hcl)

    return {
        "state_bucket_id": bucket_result["bucket_id"],
        "state_bucket_arn": bucket_result["bucket_arn"],
        "lock_table_id": table_result["table_id"],
        "lock_table_arn": table_result["table_arn"],
        "kms_key_arn": key_result["key_arn"],
        "kms_key_alias": key_result["key_alias"],
        "backend_config": settings,
        "backend_config_hcl": backend_config_hcl,
        "configuration_commands": get_backend_configuration_commands(settings),
        "validation_commands": get_validation_commands(settings),
        # Keep references to resources for dependencies
        "_declaration": declaration,
        "_key": key_result,
        "_bucket": bucket_result,
        "_table": table_result,
    }
