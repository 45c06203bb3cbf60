"""
Unit tests for module input validation
Tests ModuleInput bounds, all-errors reporting and stack config loading
"""

import dataclasses
import unittest
import sys
import os

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from state_backend.config import (
    NUMERIC_BOUNDS,
    ModuleInput,
    ValidationError,
    get_config,
    validate_module_input,
)


class FakeConfig:
    """Stands in for pulumi.Config with plain Python values"""

    def __init__(self, values=None):
        self.values = values or {}

    def get(self, key):
        return self.values.get(key)

    def get_int(self, key):
        return self.values.get(key)

    def get_bool(self, key):
        return self.values.get(key)

    def get_object(self, key):
        return self.values.get(key)


class TestModuleInputDefaults(unittest.TestCase):

    def test_defaults(self):
        """Test documented defaults for a project-only input"""
        module_input = ModuleInput(project="myproject")

        self.assertEqual(module_input.group, "nonprod")
        self.assertEqual(module_input.region, "af-south-1")
        self.assertEqual(dict(module_input.tags), {})
        self.assertEqual(module_input.state_key, "terraform.tfstate")
        self.assertFalse(module_input.enable_kms_key)
        self.assertTrue(module_input.enable_lifecycle_rules)
        self.assertEqual(module_input.abort_incomplete_upload_days, 7)
        self.assertEqual(module_input.noncurrent_version_transition_days, 30)
        self.assertEqual(module_input.noncurrent_version_expiration_days, 90)
        self.assertEqual(module_input.kms_key_deletion_window_days, 30)
        self.assertTrue(module_input.enable_point_in_time_recovery)
        self.assertTrue(module_input.protect_resources)

    def test_input_is_immutable(self):
        module_input = ModuleInput(project="myproject", tags={"Owner": "platform"})

        with self.assertRaises(dataclasses.FrozenInstanceError):
            module_input.group = "prod"
        with self.assertRaises(TypeError):
            module_input.tags["Owner"] = "someone-else"

    def test_tags_are_copied(self):
        """Test that mutating the caller's dict does not leak into the input"""
        tags = {"Owner": "platform"}
        module_input = ModuleInput(project="myproject", tags=tags)
        tags["Owner"] = "changed"

        self.assertEqual(module_input.tags["Owner"], "platform")

    def test_input_is_hashable(self):
        first = ModuleInput(project="myproject", tags={"b": "2", "a": "1"})
        second = ModuleInput(project="myproject", tags={"a": "1", "b": "2"})

        self.assertEqual(hash(first), hash(second))
        self.assertEqual(len({first, second, ModuleInput(project="myproject", group="prod")}), 2)

    def test_as_dict_round_trips(self):
        module_input = ModuleInput(project="myproject", group="prod", tags={"Team": "infra"})

        self.assertEqual(ModuleInput(**module_input.as_dict()), module_input)


class TestProjectValidation(unittest.TestCase):

    def test_valid_projects(self):
        for project in ["abc", "myproject", "my-project-01", "a" * 32, "0ab"]:
            with self.subTest(project=project):
                self.assertEqual(ModuleInput(project=project).project, project)

    def test_invalid_projects(self):
        for project in ["ab", "a" * 33, "MyProject", "my_project", "-abc", "abc-", "my project", "",
                        "myproject\n", "my\tproject"]:
            with self.subTest(project=project):
                with self.assertRaises(ValidationError):
                    ModuleInput(project=project)

    def test_missing_project(self):
        with self.assertRaises(ValidationError) as ctx:
            ModuleInput(project=None)
        self.assertIn("project is required", str(ctx.exception))


class TestGroupAndRegionValidation(unittest.TestCase):

    def test_groups(self):
        self.assertEqual(ModuleInput(project="myproject", group="prod").group, "prod")
        self.assertEqual(ModuleInput(project="myproject", group="nonprod").group, "nonprod")

        for group in ["staging", "PROD", "", None]:
            with self.subTest(group=group):
                with self.assertRaises(ValidationError):
                    ModuleInput(project="myproject", group=group)

    def test_regions(self):
        for region in ["af-south-1", "us-east-1", "eu-central-2", "us-gov-west-1"]:
            with self.subTest(region=region):
                self.assertEqual(ModuleInput(project="myproject", region=region).region, region)

        for region in ["", "AF-south-1", "us-east", "useast1", "af-south-1\n", " af-south-1"]:
            with self.subTest(region=region):
                with self.assertRaises(ValidationError):
                    ModuleInput(project="myproject", region=region)


class TestNumericBounds(unittest.TestCase):

    def test_bounds_are_inclusive(self):
        for name, (minimum, maximum) in NUMERIC_BOUNDS.items():
            for value in (minimum, maximum):
                with self.subTest(field=name, value=value):
                    module_input = ModuleInput(project="myproject", **{name: value})
                    self.assertEqual(getattr(module_input, name), value)

    def test_out_of_bounds_values_fail(self):
        for name, (minimum, maximum) in NUMERIC_BOUNDS.items():
            for value in (minimum - 1, maximum + 1):
                with self.subTest(field=name, value=value):
                    with self.assertRaises(ValidationError) as ctx:
                        ModuleInput(project="myproject", **{name: value})
                    self.assertIn(name, str(ctx.exception))

    def test_non_integer_values_fail(self):
        for value in ["7", 7.5, True]:
            with self.subTest(value=value):
                with self.assertRaises(ValidationError):
                    ModuleInput(project="myproject", abort_incomplete_upload_days=value)


class TestTagValidation(unittest.TestCase):

    def test_valid_tags(self):
        tags = {"Owner": "platform-team", "cost:center": "1234", "a/b=c+d@e_f.g": "value with spaces"}
        self.assertEqual(dict(ModuleInput(project="myproject", tags=tags).tags), tags)

    def test_invalid_tags(self):
        cases = {
            "empty key": {"": "value"},
            "long key": {"k" * 129: "value"},
            "bad key charset": {"owner!": "value"},
            "reserved prefix": {"aws:createdBy": "value"},
            "long value": {"Owner": "v" * 257},
            "bad value charset": {"Owner": "team#1"},
            "non string value": {"Owner": 1},
            "newline in key": {"Own\ner": "value"},
            "tab in key": {"Own\ter": "value"},
            "newline in value": {"Owner": "platform\n"},
            "tab in value": {"Owner": "x\ty"},
        }
        for label, tags in cases.items():
            with self.subTest(case=label):
                with self.assertRaises(ValidationError):
                    ModuleInput(project="myproject", tags=tags)

    def test_tag_count_limit(self):
        allowed = {f"tag{i}": "v" for i in range(45)}
        self.assertEqual(len(ModuleInput(project="myproject", tags=allowed).tags), 45)

        too_many = {f"tag{i}": "v" for i in range(46)}
        with self.assertRaises(ValidationError):
            ModuleInput(project="myproject", tags=too_many)

    def test_tags_overriding_defaults_do_not_count_twice(self):
        tags = {f"tag{i}": "v" for i in range(45)}
        tags.update({"Project": "other", "Environment": "qa", "Name": "ignored"})

        self.assertEqual(len(ModuleInput(project="myproject", tags=tags).tags), 48)

    def test_tags_must_be_a_mapping(self):
        with self.assertRaises(ValidationError):
            ModuleInput(project="myproject", tags=[("Owner", "platform")])


class TestOtherFields(unittest.TestCase):

    def test_state_key(self):
        self.assertEqual(ModuleInput(project="myproject", state_key="team/app.tfstate").state_key,
                         "team/app.tfstate")
        for state_key in ["", "/absolute.tfstate", "k" * 1025]:
            with self.subTest(state_key=state_key):
                with self.assertRaises(ValidationError):
                    ModuleInput(project="myproject", state_key=state_key)

    def test_boolean_flags_must_be_booleans(self):
        with self.assertRaises(ValidationError) as ctx:
            ModuleInput(project="myproject", enable_kms_key="yes")
        self.assertIn("enable_kms_key", str(ctx.exception))


class TestAllErrorsReported(unittest.TestCase):

    def test_every_violation_is_listed(self):
        """Test that validation reports all violations, not just the first"""
        with self.assertRaises(ValidationError) as ctx:
            ModuleInput(
                project="X",
                group="staging",
                region="nowhere",
                abort_incomplete_upload_days=0,
                kms_key_deletion_window_days=31,
            )

        errors = ctx.exception.errors
        message = str(ctx.exception)
        self.assertGreaterEqual(len(errors), 5)
        for fragment in ["project", "group", "region", "abort_incomplete_upload_days",
                         "kms_key_deletion_window_days"]:
            with self.subTest(fragment=fragment):
                self.assertIn(fragment, message)

    def test_validate_module_input_does_not_raise(self):
        values = ModuleInput(project="myproject").as_dict()
        self.assertEqual(validate_module_input(values), [])

        values["group"] = "qa"
        self.assertEqual(len(validate_module_input(values)), 1)


class TestGetConfig(unittest.TestCase):

    def test_reads_stack_configuration(self):
        config = FakeConfig({
            "project": "myproject",
            "group": "prod",
            "tags": {"Owner": "platform"},
            "enable_kms_key": True,
            "noncurrent_version_expiration_days": 180,
        })
        aws_config = FakeConfig({"region": "eu-west-1"})

        module_input = get_config(config, aws_config)

        self.assertEqual(module_input.project, "myproject")
        self.assertEqual(module_input.group, "prod")
        self.assertEqual(module_input.region, "eu-west-1")
        self.assertEqual(dict(module_input.tags), {"Owner": "platform"})
        self.assertTrue(module_input.enable_kms_key)
        self.assertEqual(module_input.noncurrent_version_expiration_days, 180)

    def test_unset_keys_use_defaults(self):
        module_input = get_config(FakeConfig({"project": "myproject"}), FakeConfig())

        self.assertEqual(module_input, ModuleInput(project="myproject"))

    def test_missing_project_is_a_validation_error(self):
        with self.assertRaises(ValidationError) as ctx:
            get_config(FakeConfig(), FakeConfig())
        self.assertIn("project is required", str(ctx.exception))

    def test_invalid_configuration_fails(self):
        with self.assertRaises(ValidationError):
            get_config(FakeConfig({"project": "myproject", "abort_incomplete_upload_days": 0}), FakeConfig())


if __name__ == "__main__":
    unittest.main()
