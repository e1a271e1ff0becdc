"""Code-defined recipes for the AppX engine."""

from __future__ import annotations

from collections.abc import Sequence

from falcon.contracts import Recipe, RecipeStep


def build_scratch_org_recipe(
    scratch_org_alias: str,
    *,
    apex_code_files: Sequence[str] = (),
    scratch_def_json: str = "project-scratch-def.json",
    duration_days: int = 7,
    set_default: bool = True,
) -> Recipe:
    """Create a scratch org, then run each Apex file against it in order."""
    steps = [
        RecipeStep(
            action="create-scratch-org",
            options={
                "scratch_org_alias": scratch_org_alias,
                "scratch_def_json": scratch_def_json,
                "duration_days": duration_days,
                "set_default": set_default,
            },
            description=f"Create scratch org '{scratch_org_alias}'",
        )
    ]
    steps.extend(
        RecipeStep(
            action="execute-apex",
            options={"apex_code_file": apex_file},
            description=f"Run '{apex_file}'",
        )
        for apex_file in apex_code_files
    )
    return Recipe(
        name="build-scratch-org",
        steps=tuple(steps),
        description=f"Build scratch org '{scratch_org_alias}'",
    )


def refresh_scratch_org_recipe(
    scratch_org_alias: str,
    *,
    apex_code_files: Sequence[str] = (),
    scratch_def_json: str = "project-scratch-def.json",
    duration_days: int = 7,
) -> Recipe:
    """Delete the scratch org if it exists, then rebuild it from scratch."""
    build = build_scratch_org_recipe(
        scratch_org_alias,
        apex_code_files=apex_code_files,
        scratch_def_json=scratch_def_json,
        duration_days=duration_days,
    )
    delete = RecipeStep(
        action="delete-scratch-org",
        options={"scratch_org_alias": scratch_org_alias},
        description=f"Delete scratch org '{scratch_org_alias}'",
    )
    return Recipe(
        name="refresh-scratch-org",
        steps=(delete, *build.steps),
        description=f"Refresh scratch org '{scratch_org_alias}'",
    )
