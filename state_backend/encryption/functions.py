"""
Encryption Module Functions
Decides how state resources are encrypted and creates the optional KMS key
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import pulumi
import pulumi_aws as aws

from ..config import ModuleInput
from ..naming import logical_name, resource_names, resource_tags


class EncryptionMode(str, Enum):
    KMS = "kms"
    DEFAULT = "default"


@dataclass(frozen=True)
class KeyDeclaration:
    logical_name: str
    alias: str
    description: str
    deletion_window_in_days: int
    enable_key_rotation: bool
    tags: Dict[str, str]


@dataclass(frozen=True)
class EncryptionPlan:
    """Encryption mode shared by every resource that stores state"""

    mode: EncryptionMode
    key: Optional[KeyDeclaration] = None

    def __post_init__(self):
        if (self.mode is EncryptionMode.KMS) != (self.key is not None):
            raise ValueError(f"encryption mode {self.mode.value!r} is inconsistent with key={self.key!r}")

    @property
    def key_ref(self) -> Optional[str]:
        """Logical name of the key dependents must reference, if any"""
        return self.key.logical_name if self.key else None


def plan_encryption(module_input: ModuleInput) -> EncryptionPlan:
    """
    Pick the encryption mode for the state bucket and lock table

    Args:
        module_input: Validated module input

    Returns:
        KMS plan carrying the key declaration when enable_kms_key is set,
        otherwise the provider default plan with no key
    """
    if not module_input.enable_kms_key:
        return EncryptionPlan(mode=EncryptionMode.DEFAULT)

    alias = resource_names(module_input).key_alias
    return EncryptionPlan(
        mode=EncryptionMode.KMS,
        key=KeyDeclaration(
            logical_name=logical_name(module_input, "state-key"),
            alias=alias,
            description=f"Remote state encryption key for {module_input.project} ({module_input.group})",
            deletion_window_in_days=module_input.kms_key_deletion_window_days,
            enable_key_rotation=module_input.enable_kms_key_rotation,
            tags=resource_tags(module_input, alias[len("alias/"):]),
        ),
    )


def create_kms_key(plan: EncryptionPlan, protect: bool = True) -> Dict[str, Any]:
    """
    Create the KMS key and alias described by an encryption plan

    Args:
        plan: Encryption plan from plan_encryption
        protect: Whether Pulumi should refuse to delete the key

    Returns:
        Dict with key resources and outputs; outputs are None without a key
    """
    if plan.key is None:
        return {
            "key": None,
            "alias": None,
            "key_arn": None,
            "key_alias": None,
        }

    declaration = plan.key
    pulumi.log.info(f"Creating KMS key {declaration.alias} for state encryption")

    key = aws.kms.Key(
        declaration.logical_name,
        description=declaration.description,
        key_usage="ENCRYPT_DECRYPT",
        deletion_window_in_days=declaration.deletion_window_in_days,
        enable_key_rotation=declaration.enable_key_rotation,
        tags=declaration.tags,
        opts=pulumi.ResourceOptions(protect=protect)
    )

    alias = aws.kms.Alias(
        f"{declaration.logical_name}-alias",
        name=declaration.alias,
        target_key_id=key.key_id,
        opts=pulumi.ResourceOptions(protect=protect)
    )

    return {
        "key": key,
        "alias": alias,
        "key_arn": key.arn,
        "key_alias": alias.name,
    }
