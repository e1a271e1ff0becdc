from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from appx import build_registry, build_scratch_org_recipe, refresh_scratch_org_recipe
from falcon.api import build_action_context, run_recipe_sync
from falcon.configuration import ConfigError, load_falcon_config
from falcon.contracts import Recipe
from falcon.notifications import LoggingObserver
from falcon.rendering import render_error_for, render_result_tree

_RECIPES = ("build-scratch-org", "refresh-scratch-org")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run an AppX recipe against a Salesforce org.")
    parser.add_argument("config_yaml", type=Path, help="Path to falcon config YAML")
    parser.add_argument("recipe", choices=_RECIPES, help="Recipe to run")
    parser.add_argument(
        "--apex",
        dest="apex_code_files",
        action="append",
        default=[],
        help="Apex file (relative to config_path) to run after the org is built; repeatable",
    )
    parser.add_argument("--duration-days", type=int, default=7)
    parser.add_argument(
        "--verbosity",
        choices=("user", "debug", "developer"),
        default="user",
        help="Detail level for logs and error output",
    )
    return parser.parse_args()


def build_recipe(name: str, scratch_org_alias: str, args: argparse.Namespace) -> Recipe:
    if name == "refresh-scratch-org":
        return refresh_scratch_org_recipe(
            scratch_org_alias,
            apex_code_files=args.apex_code_files,
            duration_days=args.duration_days,
        )
    return build_scratch_org_recipe(
        scratch_org_alias,
        apex_code_files=args.apex_code_files,
        duration_days=args.duration_days,
    )


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=logging.INFO if args.verbosity == "user" else logging.DEBUG,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_falcon_config(args.config_yaml)
        context = build_action_context(config, observer=LoggingObserver())
        recipe = build_recipe(args.recipe, config.target_org.alias, args)
        result = run_recipe_sync(
            recipe, context=context, registry=build_registry(), report_dir=config.report_dir
        )
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    print(render_result_tree(result))
    if result.error is not None:
        print(render_error_for(result.error, args.verbosity), file=sys.stderr)
        return result.error.exit_code
    return 0


if __name__ == "__main__":
    sys.exit(main())
