# tests/test_normalization.py

"""
Tests for reducing stored role records to the canonical module map.
"""

from datetime import datetime

import pytest

from core.navigation import ACCESS_CONTROL_MODULE_ID, GRANTABLE_MODULE_IDS
from core.normalization import deny_all_map, granted_modules, normalize_role_record
from models.enums import DescriptorKind
from models.role import PermissionDescriptor, RoleRecord


def _views(canonical):
    return {key: value["view"] for key, value in canonical.items()}


def test_legacy_module_list_grants_view():
    canonical = normalize_role_record({"modules": ["Payments", "Reports"]})

    assert canonical["payments"] == {"view": True}
    assert canonical["reports"] == {"view": True}
    for module_id in GRANTABLE_MODULE_IDS:
        if module_id not in ("payments", "reports"):
            assert canonical[module_id] == {"view": False}


def test_view_flag_wins_over_other_actions():
    canonical = normalize_role_record({
        "modulePermissions": {"senior_citizens": {"view": True, "edit": False}},
    })
    assert canonical["senior_citizens"] == {"view": True}


def test_view_false_with_other_actions_true_stays_false():
    canonical = normalize_role_record({
        "module_permissions": {"payments": {"view": False, "edit": True}},
    })
    assert canonical["payments"] == {"view": False}


def test_action_map_without_view_grants_if_any_action_true():
    canonical = normalize_role_record({
        "module_permissions": {
            "payments": {"edit": False, "delete": True},
            "reports": {"edit": False},
        },
    })
    assert canonical["payments"]["view"] is True
    assert canonical["reports"]["view"] is False


def test_boolean_descriptors_are_used_directly():
    canonical = normalize_role_record({
        "module_permissions": {"dashboard": True, "documents": False},
    })
    assert canonical["dashboard"]["view"] is True
    assert canonical["documents"]["view"] is False


@pytest.mark.parametrize("value", ["yes", 1, None, [], {}, ["view"]])
def test_unusable_descriptors_deny(value):
    canonical = normalize_role_record({"module_permissions": {"dashboard": value}})
    assert canonical["dashboard"]["view"] is False


@pytest.mark.parametrize(
    "record",
    [
        None, {}, "not a record", 12, [],
        {"module_permissions": "garbage"},
        {"modules": "Payments"},
        {"roleName": "X", "updatedBy": datetime(2024, 1, 1), "updatedAt": "not a date"},
    ],
)
def test_empty_or_malformed_record_is_deny_all(record):
    assert normalize_role_record(record) == deny_all_map()


def test_bad_metadata_keeps_permissions():
    canonical = normalize_role_record({
        "roleName": "X",
        "modules": ["Payments"],
        "updatedBy": datetime(2024, 1, 1),
        "updatedAt": "not a date",
    })
    assert granted_modules(canonical) == ["payments"]


def test_access_control_never_granted():
    canonical = normalize_role_record({
        "module_permissions": {
            "access_control": {"view": True},
            "Role Based Access Control": True,
            "dashboard": True,
        },
    })
    assert ACCESS_CONTROL_MODULE_ID not in canonical
    assert canonical["dashboard"]["view"] is True

    legacy = normalize_role_record({"modules": ["access_control", "Role Based Access Control"]})
    assert ACCESS_CONTROL_MODULE_ID not in legacy
    assert not any(_views(legacy).values())


def test_labels_and_loose_keys_resolve_to_ids():
    canonical = normalize_role_record({
        "module_permissions": {
            "Payment Management": {"view": True},
            "Senior Citizens": True,
        },
    })
    assert canonical["payments"]["view"] is True
    assert canonical["senior_citizens"]["view"] is True


def test_duplicate_keys_are_merged():
    canonical = normalize_role_record({
        "module_permissions": {"payments": False, "Payment Management": {"view": True}},
    })
    assert canonical["payments"]["view"] is True


def test_unknown_modules_are_kept_under_synthesized_key():
    canonical = normalize_role_record({"module_permissions": {"Bingo Night": True}})
    assert canonical["bingo_night"] == {"view": True}


def test_module_permissions_take_precedence_over_legacy_list():
    canonical = normalize_role_record({
        "module_permissions": {"dashboard": True},
        "modules": ["Payments"],
    })
    assert canonical["dashboard"]["view"] is True
    assert canonical["payments"]["view"] is False


def test_empty_module_permissions_fall_back_to_legacy_list():
    canonical = normalize_role_record({"module_permissions": {}, "modules": ["Payments"]})
    assert canonical["payments"]["view"] is True


def test_normalizing_a_canonical_map_is_idempotent():
    canonical = normalize_role_record({"modules": ["Dashboard", "Documents"]})
    assert normalize_role_record(canonical) == canonical
    assert normalize_role_record({"module_permissions": canonical}) == canonical


def test_accepts_role_record_model():
    record = RoleRecord.from_raw({"roleName": "Clerk", "modules": ["Dashboard"]})
    assert record.display_name == "Clerk"
    assert normalize_role_record(record)["dashboard"]["view"] is True


def test_granted_modules():
    canonical = normalize_role_record({"modules": ["Reports", "Dashboard"]})
    assert sorted(granted_modules(canonical)) == ["dashboard", "reports"]


@pytest.mark.parametrize(
    "raw, kind, allows",
    [
        (True, DescriptorKind.flag, True),
        (False, DescriptorKind.flag, False),
        ({"view": 1}, DescriptorKind.view, True),
        ({"export": True}, DescriptorKind.actions, True),
        ({}, DescriptorKind.empty, False),
        ("true", DescriptorKind.empty, False),
    ],
)
def test_descriptor_tagging(raw, kind, allows):
    descriptor = PermissionDescriptor.parse(raw)
    assert descriptor.kind == kind
    assert descriptor.allows_view is allows
