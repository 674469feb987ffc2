from __future__ import annotations

from app.features.roles.catalog import PermissionCatalog
from app.features.roles.restrictions import to_editable, to_storage
from app.features.roles.schemas import RoleRecord


def test_to_editable_copies_known_restrictions_only(catalog: PermissionCatalog) -> None:
    role = RoleRecord(
        name="Operators",
        restrictions={
            "application/share/users": "alice,bob",
            "monitoring/filter/objects": "host_name=web*",
            "removed/restriction": "value",
        },
    )

    assert to_editable(role, catalog) == {
        "_rapplication_sshare_susers": "alice,bob",
        "_rmonitoring_sfilter_sobjects": "host_name=web*",
    }


def test_to_editable_invents_no_defaults(catalog: PermissionCatalog) -> None:
    assert to_editable(RoleRecord(name="Empty"), catalog) == {}


def test_to_storage_rekeys_by_restriction_name(catalog: PermissionCatalog) -> None:
    editable = {
        "_rapplication_sshare_sgroups": "admins",
        "_rmonitoring_sfilter_sobjects": "",
        "unknown_key": "dropped",
    }

    stored = to_storage(editable, catalog)

    assert stored == {
        "application/share/groups": "admins",
        "monitoring/filter/objects": "",
    }
    assert "_rapplication_sshare_sgroups" in editable
