from __future__ import annotations

import pytest

from blackdot.core.exceptions import CatalogError, DuplicateFeatureError
from blackdot.core.features import Category, DefaultPolicy, Feature, FeatureCatalog


def test_builtin_catalog_loads_all_features() -> None:
    catalog = FeatureCatalog.builtin()

    assert len(catalog) == 25
    assert catalog.names() == sorted(catalog.names())
    assert [f.name for f in catalog.by_category(Category.CORE)] == ["shell"]

    shell = catalog.get("shell")
    assert shell is not None and shell.is_core and shell.default_enabled


def test_builtin_dependencies_and_policies() -> None:
    catalog = FeatureCatalog.builtin()

    assert catalog.get("claude_integration").dependencies == ("workspace_symlink",)
    assert catalog.get("drift_check").dependencies == ("vault",)
    assert catalog.get("cdk_tools").dependencies == ("aws_helpers",)
    assert catalog.get("dotclaude").dependencies == ("claude_integration",)

    assert catalog.get("workspace_symlink").default_policy is DefaultPolicy.ENV_GATED
    assert catalog.get("vault").default_policy is DefaultPolicy.OFF_BY_DEFAULT
    assert catalog.get("git_hooks").default_policy is DefaultPolicy.ALWAYS_ON
    assert catalog.get("modern_cli").category is Category.INTEGRATION


def test_builtin_declares_legacy_variables() -> None:
    catalog = FeatureCatalog.builtin()

    assert catalog.env_overrides.legacy == {
        "SKIP_WORKSPACE_SYMLINK": "workspace_symlink",
        "SKIP_CLAUDE_SETUP": "claude_integration",
        "BLACKDOT_SKIP_DRIFT_CHECK": "drift_check",
    }


def test_register_duplicate_raises() -> None:
    catalog = FeatureCatalog([Feature("a")])
    with pytest.raises(DuplicateFeatureError) as exc:
        catalog.register(Feature("a", description="again"))
    assert exc.value.name == "a"


def test_by_category_accepts_string() -> None:
    catalog = FeatureCatalog(
        [
            Feature("b", category="integration"),
            Feature("a", category="integration"),
            Feature("c"),
        ]
    )
    assert [f.name for f in catalog.by_category("integration")] == ["a", "b"]


def test_conflicts_are_symmetric() -> None:
    catalog = FeatureCatalog([Feature("b"), Feature("c", conflicts=frozenset({"b"}))])

    assert catalog.conflicts_of("c") == frozenset({"b"})
    assert catalog.conflicts_of("b") == frozenset({"c"})
    assert catalog.conflicts_of("missing") == frozenset()


def test_dependents_of_is_sorted() -> None:
    catalog = FeatureCatalog(
        [
            Feature("base"),
            Feature("zeta", dependencies=("base",)),
            Feature("alpha", dependencies=("base",)),
        ]
    )
    assert catalog.dependents_of("base") == ["alpha", "zeta"]
    assert catalog.dependents_of("alpha") == []


def test_from_table_rejects_schema_violation() -> None:
    table = {"features": [{"name": "x", "category": "bogus", "default": "always_on", "description": ""}]}
    with pytest.raises(CatalogError) as exc:
        FeatureCatalog.from_table(table)
    assert "category" in str(exc.value)


def test_from_table_rejects_legacy_variable_for_unknown_feature() -> None:
    table = {
        "features": [{"name": "x", "category": "optional", "default": "off_by_default", "description": ""}],
        "legacy_env": {"SKIP_Y": "y"},
    }
    with pytest.raises(CatalogError):
        FeatureCatalog.from_table(table)


def test_feature_rejects_invalid_enums_and_self_conflict() -> None:
    with pytest.raises(ValueError):
        Feature("x", category="extra")
    with pytest.raises(ValueError):
        Feature("x", default_policy="sometimes")
    with pytest.raises(ValueError):
        Feature("x", conflicts=frozenset({"x"}))
    with pytest.raises(ValueError):
        Feature("")


def test_default_enabled_follows_policy() -> None:
    assert Feature("a", default_policy="always_on").default_enabled is True
    assert Feature("b", default_policy="off_by_default").default_enabled is False
    assert Feature("c", default_policy="env_gated").default_enabled is False
    assert Feature("d", category="core", default_policy="off_by_default").default_enabled is True


def test_feature_to_dict_uses_catalog_field_names() -> None:
    feature = Feature("x", description="X", dependencies=("a", "a", "b"), conflicts=frozenset({"z", "y"}))
    assert feature.to_dict() == {
        "name": "x",
        "description": "X",
        "category": "optional",
        "dependencies": ["a", "b"],
        "conflicts": ["y", "z"],
        "default": "off_by_default",
    }
    assert Feature.from_dict(feature.to_dict()) == feature
