from pathlib import Path
from typing import Optional

from ipautils.src.core.errors import EntitlementsIOError
from ipautils.src.core.facts import ProfileFacts

BUNDLE_ID_PLACEHOLDER = "BUNDLE_ID"
GET_TASK_ALLOW_PLACEHOLDER = "GET_TASK_ALLOW"

BUNDLED_TEMPLATE = (
    Path(__file__).resolve().parent.parent.parent
    / "templates"
    / "Entitlements.template.plist"
)


def render_entitlements(template: str, profile: ProfileFacts) -> str:
    """Fill the template placeholders from the profile facts"""
    application_identifier = f"{profile.team_identifier}.{profile.bundle_id}"
    # get-task-allow is the inverse of a release build
    get_task_allow = "false" if profile.is_build_release else "true"

    rendered = template.replace(BUNDLE_ID_PLACEHOLDER, application_identifier, 1)
    return rendered.replace(GET_TASK_ALLOW_PLACEHOLDER, get_task_allow, 1)


def write_entitlements(
    profile: ProfileFacts,
    target_path: Path,
    template_path: Optional[Path] = None,
) -> Path:
    """Render the entitlements template and write it to target_path"""
    template_path = template_path or BUNDLED_TEMPLATE
    try:
        template = Path(template_path).read_text()
    except OSError as e:
        raise EntitlementsIOError(
            f"Could not read entitlements template {template_path}: {e}"
        ) from e

    try:
        Path(target_path).write_text(render_entitlements(template, profile))
    except OSError as e:
        raise EntitlementsIOError(f"Could not write entitlements {target_path}: {e}") from e

    return Path(target_path)
