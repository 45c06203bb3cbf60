"""
State Bucket Module Functions
Declares and creates the S3 bucket that stores remote state files
"""

from dataclasses import dataclass
import json
from typing import Any, Dict, Optional, Tuple

import pulumi
import pulumi_aws as aws

from ..config import ModuleInput
from ..encryption import EncryptionMode, EncryptionPlan
from ..naming import logical_name, resource_names, resource_tags

ABORT_INCOMPLETE_UPLOAD = "abort-incomplete-multipart-upload"
EXPIRE_NONCURRENT_VERSIONS = "expire-noncurrent-versions"
EXPIRE_DELETE_MARKERS = "expire-delete-markers"

NONCURRENT_STORAGE_CLASS = "STANDARD_IA"


@dataclass(frozen=True)
class LifecycleRule:
    id: str
    days: Optional[int] = None
    transition_days: Optional[int] = None
    storage_class: Optional[str] = None


@dataclass(frozen=True)
class BucketDeclaration:
    logical_name: str
    name: str
    encryption_mode: EncryptionMode
    kms_key_ref: Optional[str]
    lifecycle_rules: Tuple[LifecycleRule, ...]
    policy: Dict[str, Any]
    tags: Dict[str, str]
    force_destroy: bool = False
    versioning: bool = True
    block_public_access: bool = True
    object_ownership: str = "BucketOwnerEnforced"


def generate_lifecycle_rules(module_input: ModuleInput) -> Tuple[LifecycleRule, ...]:
    """
    Lifecycle rules bounding the storage used by old state versions

    Args:
        module_input: Validated module input

    Returns:
        Abort, noncurrent expiry and delete marker rules in that order, or an
        empty tuple when lifecycle rules are disabled
    """
    if not module_input.enable_lifecycle_rules:
        return ()

    return (
        LifecycleRule(
            id=ABORT_INCOMPLETE_UPLOAD,
            days=module_input.abort_incomplete_upload_days,
        ),
        LifecycleRule(
            id=EXPIRE_NONCURRENT_VERSIONS,
            days=module_input.noncurrent_version_expiration_days,
            transition_days=module_input.noncurrent_version_transition_days,
            storage_class=NONCURRENT_STORAGE_CLASS,
        ),
        LifecycleRule(id=EXPIRE_DELETE_MARKERS),
    )


def bucket_policy_document(bucket_name: str) -> Dict[str, Any]:
    """Deny every request to the bucket that is not made over TLS"""
    bucket_arn = f"arn:aws:s3:::{bucket_name}"
    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Sid": "DenyInsecureTransport",
                "Effect": "Deny",
                "Principal": "*",
                "Action": "s3:*",
                "Resource": [bucket_arn, f"{bucket_arn}/*"],
                "Condition": {"Bool": {"aws:SecureTransport": "false"}},
            }
        ],
    }


def declare_bucket(module_input: ModuleInput, plan: EncryptionPlan) -> BucketDeclaration:
    bucket_name = resource_names(module_input).bucket
    return BucketDeclaration(
        logical_name=logical_name(module_input, "state-bucket"),
        name=bucket_name,
        encryption_mode=plan.mode,
        kms_key_ref=plan.key_ref,
        lifecycle_rules=generate_lifecycle_rules(module_input),
        policy=bucket_policy_document(bucket_name),
        tags=resource_tags(module_input, bucket_name),
        force_destroy=module_input.force_destroy,
    )


def _lifecycle_rule_args(rule: LifecycleRule) -> 'aws.s3.BucketLifecycleConfigurationRuleArgs':
    rule_args = {
        "id": rule.id,
        "status": "Enabled",
        "filter": aws.s3.BucketLifecycleConfigurationRuleFilterArgs(prefix=""),
    }

    if rule.id == ABORT_INCOMPLETE_UPLOAD:
        rule_args["abort_incomplete_multipart_upload"] = (
            aws.s3.BucketLifecycleConfigurationRuleAbortIncompleteMultipartUploadArgs(
                days_after_initiation=rule.days
            )
        )
    elif rule.id == EXPIRE_NONCURRENT_VERSIONS:
        rule_args["noncurrent_version_transitions"] = [
            aws.s3.BucketLifecycleConfigurationRuleNoncurrentVersionTransitionArgs(
                noncurrent_days=rule.transition_days,
                storage_class=rule.storage_class
            )
        ]
        rule_args["noncurrent_version_expiration"] = (
            aws.s3.BucketLifecycleConfigurationRuleNoncurrentVersionExpirationArgs(
                noncurrent_days=rule.days
            )
        )
    elif rule.id == EXPIRE_DELETE_MARKERS:
        rule_args["expiration"] = aws.s3.BucketLifecycleConfigurationRuleExpirationArgs(
            expired_object_delete_marker=True
        )
    else:
        raise ValueError(f"unknown lifecycle rule: {rule.id!r}")

    return aws.s3.BucketLifecycleConfigurationRuleArgs(**rule_args)


def _encryption_default_args(declaration: BucketDeclaration, kms_key_arn):
    ByDefaultArgs = aws.s3.BucketServerSideEncryptionConfigurationRuleApplyServerSideEncryptionByDefaultArgs

    if declaration.encryption_mode is EncryptionMode.KMS:
        if kms_key_arn is None:
            raise ValueError(f"bucket {declaration.name} requires a KMS key but none was created")
        return ByDefaultArgs(sse_algorithm="aws:kms", kms_master_key_id=kms_key_arn)

    return ByDefaultArgs(sse_algorithm="AES256")


def create_state_bucket(declaration: BucketDeclaration,
                        kms_key_arn: Optional['pulumi.Output[str]'] = None,
                        protect: bool = True) -> Dict[str, Any]:
    """
    Create the state bucket and its settings

    Args:
        declaration: Bucket declaration from declare_bucket
        kms_key_arn: ARN of the state key, required in KMS mode
        protect: Whether Pulumi should refuse to delete the bucket

    Returns:
        Dict with bucket resources and outputs
    """
    name = declaration.logical_name
    sse_default = _encryption_default_args(declaration, kms_key_arn)

    bucket = aws.s3.Bucket(
        name,
        bucket=declaration.name,
        force_destroy=declaration.force_destroy,
        tags=declaration.tags,
        opts=pulumi.ResourceOptions(protect=protect)
    )

    depends_on_bucket = pulumi.ResourceOptions(depends_on=[bucket])

    # Enable versioning
    versioning = aws.s3.BucketVersioning(
        f"{name}-versioning",
        bucket=bucket.id,
        versioning_configuration=aws.s3.BucketVersioningVersioningConfigurationArgs(
            status="Enabled" if declaration.versioning else "Suspended"
        ),
        opts=depends_on_bucket
    )

    # Enable encryption
    encryption = aws.s3.BucketServerSideEncryptionConfiguration(
        f"{name}-encryption",
        bucket=bucket.id,
        rules=[
            aws.s3.BucketServerSideEncryptionConfigurationRuleArgs(
                apply_server_side_encryption_by_default=sse_default,
                bucket_key_enabled=declaration.encryption_mode is EncryptionMode.KMS
            )
        ],
        opts=depends_on_bucket
    )

    # Block public access
    public_access_block = aws.s3.BucketPublicAccessBlock(
        f"{name}-pab",
        bucket=bucket.id,
        block_public_acls=declaration.block_public_access,
        block_public_policy=declaration.block_public_access,
        ignore_public_acls=declaration.block_public_access,
        restrict_public_buckets=declaration.block_public_access,
        opts=depends_on_bucket
    )

    ownership_controls = aws.s3.BucketOwnershipControls(
        f"{name}-ownership",
        bucket=bucket.id,
        rule=aws.s3.BucketOwnershipControlsRuleArgs(
            object_ownership=declaration.object_ownership
        ),
        opts=depends_on_bucket
    )

    # The policy is applied once public access is blocked
    policy = aws.s3.BucketPolicy(
        f"{name}-policy",
        bucket=bucket.id,
        policy=json.dumps(declaration.policy),
        opts=pulumi.ResourceOptions(depends_on=[bucket, public_access_block])
    )

    lifecycle = None
    if declaration.lifecycle_rules:
        lifecycle = aws.s3.BucketLifecycleConfiguration(
            f"{name}-lifecycle",
            bucket=bucket.id,
            rules=[_lifecycle_rule_args(rule) for rule in declaration.lifecycle_rules],
            opts=pulumi.ResourceOptions(depends_on=[bucket, versioning])
        )
    else:
        pulumi.log.warn(
            f"Lifecycle rules are disabled for {declaration.name}; "
            "noncurrent state versions will be kept indefinitely"
        )

    return {
        "bucket": bucket,
        "bucket_id": bucket.id,
        "bucket_arn": bucket.arn,
        "bucket_name": declaration.name,
        "versioning": versioning,
        "encryption": encryption,
        "public_access_block": public_access_block,
        "ownership_controls": ownership_controls,
        "policy": policy,
        "lifecycle": lifecycle,
    }
