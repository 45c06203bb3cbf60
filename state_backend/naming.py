"""
Resource naming and tagging for the state backend
Names are derived from project and group only, so re-running with the same
input always targets the same resources
"""

from dataclasses import dataclass
from typing import Dict

from .config import ModuleInput

BUCKET_SUFFIX = "tfstate"
TABLE_SUFFIX = "tfstate-lock"
KEY_SUFFIX = "tfstate"


@dataclass(frozen=True)
class ResourceNames:
    prefix: str
    bucket: str
    table: str
    key_alias: str


def resource_names(module_input: ModuleInput) -> ResourceNames:
    prefix = f"{module_input.project}-{module_input.group}"
    return ResourceNames(
        prefix=prefix,
        bucket=f"{prefix}-{BUCKET_SUFFIX}",
        table=f"{prefix}-{TABLE_SUFFIX}",
        key_alias=f"alias/{prefix}-{KEY_SUFFIX}",
    )


def logical_name(module_input: ModuleInput, kind: str) -> str:
    """Pulumi resource name for a resource kind, e.g. 'state-bucket'"""
    return f"{module_input.project}-{module_input.group}-{kind}"


def resource_tags(module_input: ModuleInput, name: str) -> Dict[str, str]:
    """
    Tags for a single resource

    Defaults first, then the user's tags, then Name, so the user can override
    every default except the resource name.
    """
    return {
        "Project": module_input.project,
        "Environment": module_input.group,
        "ManagedBy": "pulumi",
        "Module": "state-backend",
        **module_input.tags,
        "Name": name,
    }
