"""
Lock Table Module Functions
Declares and creates the DynamoDB table used for state locking
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

import pulumi
import pulumi_aws as aws

from ..config import ModuleInput
from ..encryption import EncryptionMode, EncryptionPlan
from ..naming import logical_name, resource_names, resource_tags

LOCK_HASH_KEY = "LockID"


@dataclass(frozen=True)
class TableDeclaration:
    logical_name: str
    name: str
    encryption_mode: EncryptionMode
    kms_key_ref: Optional[str]
    point_in_time_recovery: bool
    deletion_protection: bool
    tags: Dict[str, str]
    hash_key: str = LOCK_HASH_KEY
    hash_key_type: str = "S"
    billing_mode: str = "PAY_PER_REQUEST"


def declare_lock_table(module_input: ModuleInput, plan: EncryptionPlan) -> TableDeclaration:
    table_name = resource_names(module_input).table
    return TableDeclaration(
        logical_name=logical_name(module_input, "state-lock-table"),
        name=table_name,
        encryption_mode=plan.mode,
        kms_key_ref=plan.key_ref,
        point_in_time_recovery=module_input.enable_point_in_time_recovery,
        deletion_protection=module_input.enable_deletion_protection,
        tags=resource_tags(module_input, table_name),
    )


def create_lock_table(declaration: TableDeclaration,
                      kms_key_arn: Optional['pulumi.Output[str]'] = None,
                      protect: bool = True) -> Dict[str, Any]:
    """
    Create DynamoDB table for state locking

    Args:
        declaration: Table declaration from declare_lock_table
        kms_key_arn: ARN of the state key, required in KMS mode
        protect: Whether Pulumi should refuse to delete the table

    Returns:
        Dict with table resource and outputs
    """
    if declaration.encryption_mode is EncryptionMode.KMS:
        if kms_key_arn is None:
            raise ValueError(f"table {declaration.name} requires a KMS key but none was created")
        sse = aws.dynamodb.TableServerSideEncryptionArgs(
            enabled=True,
            kms_key_arn=kms_key_arn
        )
    else:
        # Disabled means the AWS owned key, which DynamoDB always applies
        sse = aws.dynamodb.TableServerSideEncryptionArgs(enabled=False)

    table = aws.dynamodb.Table(
        declaration.logical_name,
        name=declaration.name,
        billing_mode=declaration.billing_mode,
        hash_key=declaration.hash_key,
        attributes=[
            aws.dynamodb.TableAttributeArgs(
                name=declaration.hash_key,
                type=declaration.hash_key_type
            )
        ],
        server_side_encryption=sse,
        point_in_time_recovery=aws.dynamodb.TablePointInTimeRecoveryArgs(
            enabled=declaration.point_in_time_recovery
        ),
        deletion_protection_enabled=declaration.deletion_protection,
        tags=declaration.tags,
        opts=pulumi.ResourceOptions(protect=protect)
    )

    return {
        "table": table,
        "table_id": table.id,
        "table_name": table.name,
        "table_arn": table.arn,
    }
