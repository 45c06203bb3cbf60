"""
State Bucket Module
Versioned, encrypted, private S3 bucket holding remote state files
"""

from .functions import (
    ABORT_INCOMPLETE_UPLOAD,
    EXPIRE_DELETE_MARKERS,
    EXPIRE_NONCURRENT_VERSIONS,
    BucketDeclaration,
    LifecycleRule,
    bucket_policy_document,
    create_state_bucket,
    declare_bucket,
    generate_lifecycle_rules,
)

__all__ = [
    "ABORT_INCOMPLETE_UPLOAD",
    "EXPIRE_DELETE_MARKERS",
    "EXPIRE_NONCURRENT_VERSIONS",
    "BucketDeclaration",
    "LifecycleRule",
    "bucket_policy_document",
    "create_state_bucket",
    "declare_bucket",
    "generate_lifecycle_rules",
]
