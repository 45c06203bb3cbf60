"""
Remote State Backend Bootstrap
S3 bucket for state files, DynamoDB table for locking, optional KMS key
"""
import pulumi
from state_backend import create_state_storage_resources, get_config

# Configuration (validation errors abort the update before any resource call)
config = get_config()

# State storage
state_storage = create_state_storage_resources(config)

# Exports
pulumi.export("state_bucket_id", state_storage["state_bucket_id"])
pulumi.export("state_bucket_arn", state_storage["state_bucket_arn"])
pulumi.export("lock_table_id", state_storage["lock_table_id"])
pulumi.export("lock_table_arn", state_storage["lock_table_arn"])
pulumi.export("kms_key_arn", state_storage["kms_key_arn"])
pulumi.export("kms_key_alias", state_storage["kms_key_alias"])
pulumi.export("backend_config", state_storage["backend_config"])
pulumi.export("backend_config_hcl", state_storage["backend_config_hcl"])
pulumi.export("backend_configuration_commands", state_storage["configuration_commands"])
pulumi.export("validation_commands", state_storage["validation_commands"])
