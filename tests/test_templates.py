# tests/test_templates.py

"""Tests for template definitions and the catalog invariants."""

import pytest
from sqlalchemy import select

from combatstats.db.models import User
from combatstats.queries import catalog
from combatstats.queries.templates import FilterKind, FilterSpec, QueryTemplate


def test_default_sort_must_be_allowed():
    with pytest.raises(ValueError, match="allow-list"):
        QueryTemplate(
            name="broken",
            base=select(User.oidUser),
            sort_keys={"EXP": User.EXP},
            default_sort="Money",
        )


def test_filter_names_must_be_unique():
    with pytest.raises(ValueError, match="duplicate"):
        QueryTemplate(
            name="broken",
            base=select(User.oidUser),
            sort_keys={"EXP": User.EXP},
            default_sort="EXP",
            filters=(
                FilterSpec("nickname", User.NickName, FilterKind.CONTAINS),
                FilterSpec("nickname", User.NickName),
            ),
        )


def test_sort_allow_list_is_frozen():
    with pytest.raises(TypeError):
        catalog.CLANS.sort_keys["strName"] = User.NickName  # type: ignore[index]


def test_catalog_names_match_routes():
    assert set(catalog.TEMPLATES) == {
        "users",
        "inventory",
        "clans",
        "clanmembers",
        "ranking",
        "gamemode-stats",
        "player-matches",
        "userstore",
    }


def test_only_clan_members_requires_a_filter():
    required = {
        (template.name, spec.name)
        for template in catalog.TEMPLATES.values()
        for spec in template.filters
        if spec.required
    }
    assert required == {("clanmembers", "clanname")}


def test_inventory_covers_every_equipment_slot():
    labels = set(catalog.INVENTORY.base.selected_columns.keys())
    for slot, _ in catalog.EQUIP_SLOTS:
        assert f"Nr_Slot_{slot}" in labels
        assert f"Slot_{slot}" in labels
