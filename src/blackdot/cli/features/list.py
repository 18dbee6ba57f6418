"""
Blackdot features list command.

SUMMARY: List all features and their status
"""

from __future__ import annotations

import argparse

from blackdot.cli import OutputFormatter, add_json_flag, build_resolver
from blackdot.core.exceptions import BlackdotError
from blackdot.core.features import Category

SUMMARY = "List all features and their status"

CATEGORY_LABELS = (
    (Category.CORE, "Core (Always Enabled)"),
    (Category.OPTIONAL, "Optional Features"),
    (Category.INTEGRATION, "Integrations"),
)


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "category",
        nargs="?",
        choices=[c.value for c in Category],
        help="Only list features in this category",
    )
    parser.add_argument(
        "--all",
        "-a",
        dest="show_all",
        action="store_true",
        help="Show dependencies for each feature",
    )
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=args.json)

    try:
        resolver = build_resolver()
        catalog = resolver.catalog

        if args.json:
            features = catalog.by_category(args.category) if args.category else catalog.all()
            formatter.json_output(
                {
                    f.name: {
                        "enabled": resolver.enabled(f.name),
                        "category": f.category.value,
                        "description": f.description,
                        "dependencies": list(f.dependencies),
                    }
                    for f in features
                }
            )
            return 0

        formatter.text("Feature Registry")
        formatter.text("=" * 60)
        formatter.text("")
        for category, label in CATEGORY_LABELS:
            if args.category and args.category != category.value:
                continue
            formatter.text(f"{label}:")
            for feature in catalog.by_category(category):
                mark = "✓" if resolver.enabled(feature.name) else "○"
                formatter.text(f"  {mark} {feature.name:<20} {feature.description}")
                if args.show_all and feature.dependencies:
                    formatter.text(f"      requires: {', '.join(feature.dependencies)}")
            formatter.text("")

        formatter.text("Legend: ✓ enabled  ○ disabled")
        formatter.text("Use 'blackdot features enable <name>' to enable a feature")
        return 0

    except BlackdotError as e:
        formatter.error(e, error_code="features_list_error")
        return 1
