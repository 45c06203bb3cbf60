"""
Configuration management for the state backend bootstrap
Reads the Pulumi stack configuration into a validated, immutable ModuleInput
"""

import re
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

import pulumi

GROUPS = ("nonprod", "prod")

PROJECT_PATTERN = re.compile(r"[a-z0-9][a-z0-9-]*[a-z0-9]")
REGION_PATTERN = re.compile(r"[a-z]{2}(-[a-z]+)+-[0-9]")
# Plain space only; tabs and newlines are rejected
TAG_PATTERN = re.compile(r"[\w .:/=+\-@]*")

MAX_TAGS = 50
# Tags set on every resource by naming.resource_tags
DEFAULT_TAG_KEYS = ("Project", "Environment", "ManagedBy", "Module", "Name")

# (minimum, maximum) days, inclusive
NUMERIC_BOUNDS = {
    "kms_key_deletion_window_days": (7, 30),
    "abort_incomplete_upload_days": (1, 365),
    "noncurrent_version_transition_days": (30, 3650),
    "noncurrent_version_expiration_days": (1, 3650),
}

BOOLEAN_FIELDS = (
    "enable_kms_key",
    "enable_kms_key_rotation",
    "enable_lifecycle_rules",
    "enable_point_in_time_recovery",
    "enable_deletion_protection",
    "force_destroy",
    "protect_resources",
)


class ValidationError(ValueError):
    """Raised when module input violates one or more constraints"""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        details = "\n".join(f"  - {error}" for error in self.errors)
        super().__init__(f"invalid module input ({len(self.errors)} error(s)):\n{details}")


def _validate_project(project: Any) -> List[str]:
    if not isinstance(project, str) or not project:
        return ["project is required and must be a non-empty string"]
    errors = []
    if not 3 <= len(project) <= 32:
        errors.append(f"project must be 3-32 characters long, got {len(project)}: {project!r}")
    if not PROJECT_PATTERN.fullmatch(project):
        errors.append(
            f"project may only contain lowercase letters, digits and hyphens, "
            f"and must start and end with a letter or digit: {project!r}"
        )
    return errors


def _validate_tags(tags: Any) -> List[str]:
    if not isinstance(tags, Mapping):
        return [f"tags must be a mapping of strings to strings, got {type(tags).__name__}"]

    errors = []
    for key, value in tags.items():
        if not isinstance(key, str) or not isinstance(value, str):
            errors.append(f"tag {key!r} must map a string to a string")
            continue
        if not 1 <= len(key) <= 128:
            errors.append(f"tag key must be 1-128 characters long: {key!r}")
        if not TAG_PATTERN.fullmatch(key):
            errors.append(f"tag key contains unsupported characters: {key!r}")
        if key.lower().startswith("aws:"):
            errors.append(f"tag key uses the reserved 'aws:' prefix: {key!r}")
        if len(value) > 256:
            errors.append(f"tag value for {key!r} must be at most 256 characters long")
        if not TAG_PATTERN.fullmatch(value):
            errors.append(f"tag value for {key!r} contains unsupported characters")

    # User tags may override defaults, so count the merged key set
    merged = len(set(tags) | set(DEFAULT_TAG_KEYS))
    if merged > MAX_TAGS:
        errors.append(
            f"at most {MAX_TAGS} tags are allowed per resource once defaults are merged, got {merged}"
        )
    return errors


def validate_module_input(values: Mapping[str, Any]) -> List[str]:
    """
    Collect every constraint violated by a candidate set of module inputs

    Args:
        values: Field name to value mapping, as held by ModuleInput

    Returns:
        List of human readable violations, empty when the input is valid
    """
    errors = _validate_project(values.get("project"))

    group = values.get("group")
    if group not in GROUPS:
        errors.append(f"group must be one of {', '.join(GROUPS)}, got {group!r}")

    region = values.get("region")
    if not isinstance(region, str) or not REGION_PATTERN.fullmatch(region):
        errors.append(f"region must be an AWS region code such as 'af-south-1', got {region!r}")

    errors.extend(_validate_tags(values.get("tags")))

    state_key = values.get("state_key")
    if not isinstance(state_key, str) or not 1 <= len(state_key) <= 1024:
        errors.append("state_key must be a string of 1-1024 characters")
    elif state_key.startswith("/"):
        errors.append(f"state_key must not start with '/': {state_key!r}")

    for name, (minimum, maximum) in NUMERIC_BOUNDS.items():
        value = values.get(name)
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, int):
            errors.append(f"{name} must be an integer, got {value!r}")
        elif not minimum <= value <= maximum:
            errors.append(f"{name} must be between {minimum} and {maximum}, got {value}")

    for name in BOOLEAN_FIELDS:
        if not isinstance(values.get(name), bool):
            errors.append(f"{name} must be a boolean, got {values.get(name)!r}")

    return errors


@dataclass(frozen=True)
class ModuleInput:
    """Validated, immutable inputs of the state backend"""

    project: str
    group: str = "nonprod"
    region: str = "af-south-1"
    tags: Mapping[str, str] = field(default_factory=dict)
    state_key: str = "terraform.tfstate"

    # Encryption
    enable_kms_key: bool = False
    kms_key_deletion_window_days: int = 30
    enable_kms_key_rotation: bool = True

    # Bucket lifecycle
    enable_lifecycle_rules: bool = True
    abort_incomplete_upload_days: int = 7
    noncurrent_version_transition_days: int = 30
    noncurrent_version_expiration_days: int = 90

    # Lock table
    enable_point_in_time_recovery: bool = True
    enable_deletion_protection: bool = True

    # Teardown safety
    force_destroy: bool = False
    protect_resources: bool = True

    def __post_init__(self):
        errors = validate_module_input({f.name: getattr(self, f.name) for f in fields(self)})
        if errors:
            raise ValidationError(errors)
        object.__setattr__(self, "tags", MappingProxyType(dict(self.tags)))

    def __hash__(self):
        values = self.as_dict()
        values["tags"] = tuple(sorted(values["tags"].items()))
        return hash(tuple(values.values()))

    def as_dict(self) -> Dict[str, Any]:
        """Plain dict view, tags included as a regular dict"""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values["tags"] = dict(self.tags)
        return values


def get_config(config: Optional[pulumi.Config] = None,
               aws_config: Optional[pulumi.Config] = None) -> ModuleInput:
    """
    Build the module input from the Pulumi stack configuration

    Args:
        config: Project configuration namespace (defaults to pulumi.Config())
        aws_config: AWS provider configuration namespace (defaults to pulumi.Config("aws"))

    Returns:
        Validated ModuleInput

    Raises:
        ValidationError: When any configured value violates its constraints
    """
    config = config or pulumi.Config()
    aws_config = aws_config or pulumi.Config("aws")

    values: Dict[str, Any] = {
        "project": config.get("project"),
        "group": config.get("group"),
        "region": aws_config.get("region"),
        "tags": config.get_object("tags"),
        "state_key": config.get("state_key"),
    }
    for name in NUMERIC_BOUNDS:
        values[name] = config.get_int(name)
    for name in BOOLEAN_FIELDS:
        values[name] = config.get_bool(name)

    # Unset keys fall back to the dataclass defaults; project has none
    kwargs = {name: value for name, value in values.items() if value is not None}
    kwargs["project"] = values["project"]
    return ModuleInput(**kwargs)
