from __future__ import annotations

import pytest

from app.features.roles.catalog import PermissionCatalog, sanitize_name
from app.features.roles.encoder import WILDCARD, cascade, decode, encode


def _keys(*names: str) -> set[str]:
    return {sanitize_name(name) for name in names}


@pytest.mark.parametrize(
    "names",
    [
        (),
        ("admin",),
        ("admin", "config/*"),
        ("application/log", "module/monitoring", "monitoring/command/schedule-check", "reporting/*"),
    ],
)
def test_decode_reverses_encode(catalog: PermissionCatalog, names: tuple[str, ...]) -> None:
    selected = _keys(*names)

    decoded = decode(encode(selected, False, catalog), catalog)

    assert decoded.wildcard is False
    assert decoded.selected == selected


def test_encode_returns_wildcard_regardless_of_selection(catalog: PermissionCatalog) -> None:
    assert encode(_keys("admin", "application/log"), True, catalog) == WILDCARD
    assert encode(set(), True, catalog) == "*"


def test_encode_uses_catalog_order_and_ignores_unknown_keys(catalog: PermissionCatalog) -> None:
    selected = ["reporting_sreports", "no_such_key", "config_s_a", "admin"]

    assert encode(selected, False, catalog) == "admin,config/*,reporting/reports"


def test_decode_wildcard_selects_nothing(catalog: PermissionCatalog) -> None:
    decoded = decode("*", catalog)

    assert decoded.wildcard is True
    assert decoded.selected == set()


def test_decode_trims_and_drops_unknown_names(catalog: PermissionCatalog) -> None:
    decoded = decode(" admin , ,removed/module,config/* ", catalog)

    assert decoded.selected == {"admin", "config_s_a"}


@pytest.mark.parametrize("stored", [None, ""])
def test_decode_empty_value(catalog: PermissionCatalog, stored) -> None:
    decoded = decode(stored, catalog)

    assert decoded.wildcard is False
    assert decoded.selected == set()


def test_cascade_full_permission_selects_and_excludes_siblings(catalog: PermissionCatalog) -> None:
    state = cascade(_keys("monitoring/*"), catalog)

    siblings = _keys("monitoring/command/*", "monitoring/command/schedule-check")
    usage = sanitize_name("module/monitoring")
    assert siblings | {usage} <= state.selected
    assert siblings | {usage} == state.disabled
    assert state.excluded == siblings
    assert state.submitted == _keys("monitoring/*", "module/monitoring")


def test_cascade_leaves_other_namespaces_alone(catalog: PermissionCatalog) -> None:
    state = cascade(_keys("monitoring/*", "reporting/reports"), catalog)

    assert sanitize_name("reporting/reports") in state.submitted
    assert sanitize_name("reporting/reports") not in state.disabled
    assert not state.disabled & set(catalog.permissions["application"])


def test_cascade_without_full_permission_changes_nothing(catalog: PermissionCatalog) -> None:
    selected = _keys("monitoring/command/*", "admin")

    state = cascade(selected, catalog)

    assert state.selected == selected
    assert state.disabled == set()
    assert state.submitted == selected
