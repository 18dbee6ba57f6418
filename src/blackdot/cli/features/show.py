"""
Blackdot features show command.

SUMMARY: Show details for a feature
"""

from __future__ import annotations

import argparse

from blackdot.cli import OutputFormatter, add_feature_name_arg, add_json_flag, build_resolver
from blackdot.core.exceptions import BlackdotError, UnknownFeatureError
from blackdot.core.features import transitive_dependencies

SUMMARY = "Show details for a feature"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_feature_name_arg(parser, "Feature to show")
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=args.json)

    try:
        resolver = build_resolver()
        feature = resolver.catalog.get(args.name)
        if feature is None:
            raise UnknownFeatureError(args.name)

        state = resolver.explain(args.name)
        payload = {
            **feature.to_dict(),
            "enabled": state.enabled,
            "source": state.source.value,
            "origin": state.origin,
            "all_dependencies": transitive_dependencies(resolver.catalog, args.name),
            "dependents": resolver.dependents(args.name),
            "missing_dependencies": resolver.missing_deps(args.name),
        }

        if args.json:
            formatter.json_output(payload)
            return 0

        formatter.text(f"{feature.name}: {feature.description}")
        formatter.text_kv("enabled", "yes" if state.enabled else "no")
        source = state.source.value if not state.origin else f"{state.source.value} ({state.origin})"
        formatter.text_kv("decided by", source)
        formatter.text_kv("category", feature.category.value)
        formatter.text_kv("default", feature.default_policy.value)
        formatter.text_kv("dependencies", ", ".join(feature.dependencies) or "none")
        if len(payload["all_dependencies"]) > len(feature.dependencies):
            formatter.text_kv("requires (all)", ", ".join(payload["all_dependencies"]))
        formatter.text_kv("dependents", ", ".join(payload["dependents"]) or "none")
        if feature.conflicts:
            formatter.text_kv("conflicts", ", ".join(sorted(feature.conflicts)))
        if payload["missing_dependencies"]:
            formatter.text_kv("missing", ", ".join(payload["missing_dependencies"]))
        return 0

    except BlackdotError as e:
        formatter.error(e, error_code="features_show_error")
        return 1
