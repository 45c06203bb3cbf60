"""
Encryption Module
Optional customer-managed KMS key shared by the state bucket and lock table
"""

from .functions import (
    EncryptionMode,
    EncryptionPlan,
    KeyDeclaration,
    create_kms_key,
    plan_encryption,
)

__all__ = [
    "EncryptionMode",
    "EncryptionPlan",
    "KeyDeclaration",
    "create_kms_key",
    "plan_encryption",
]
