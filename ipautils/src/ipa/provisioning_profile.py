from pathlib import Path
import plistlib
from xml.parsers.expat import ExpatError
from typing import Any, Dict

from asn1crypto.cms import ContentInfo

from ipautils.logger import get_console
from ipautils.src.core.errors import ParseError
from ipautils.src.core.facts import Environment, ProfileFacts


def dump_prov(data: bytes) -> Dict[str, Any]:
    """Decode the plist wrapped in a provisioning profile's CMS envelope"""
    try:
        content_info = ContentInfo.load(data)
        signed_data = content_info["content"]
        # The plist is the encapsulated content of the signed data
        plist_data = signed_data["encap_content_info"]["content"].native
    except (ValueError, TypeError, KeyError) as e:
        raise ParseError(f"Provisioning profile is not a valid CMS structure: {e}") from e

    if not plist_data:
        raise ParseError("Provisioning profile carries no plist payload")

    try:
        profile = plistlib.loads(plist_data)
    except (plistlib.InvalidFileException, ExpatError, ValueError) as e:
        raise ParseError(f"Provisioning profile plist is malformed: {e}") from e

    if not isinstance(profile, dict):
        raise ParseError("Provisioning profile plist is not a dictionary")
    return profile


def _team_identifier(profile: Dict[str, Any], entitlements: Dict[str, Any]) -> str:
    if team_id := entitlements.get("com.apple.developer.team-identifier"):
        return team_id

    team_ids = profile.get("TeamIdentifier")
    if isinstance(team_ids, list) and team_ids:
        return team_ids[0]

    app_id = entitlements.get("application-identifier", "")
    if "." in app_id:
        return app_id.split(".", 1)[0]

    raise ParseError("Failed to extract team identifier from provisioning profile")


def profile_facts_from_plist(profile: Dict[str, Any]) -> ProfileFacts:
    """Build ProfileFacts from a decoded provisioning profile dictionary"""
    entitlements = profile.get("Entitlements")
    if not isinstance(entitlements, dict):
        raise ParseError("Provisioning profile has no Entitlements dictionary")

    app_id = entitlements.get("application-identifier")
    if not isinstance(app_id, str) or not app_id:
        raise ParseError("Provisioning profile has no application-identifier")

    team_id = _team_identifier(profile, entitlements)

    # application-identifier is "TEAMID.bundle.id"
    bundle_id = app_id
    if app_id.startswith(f"{team_id}."):
        bundle_id = app_id[len(team_id) + 1 :]

    devices = profile.get("ProvisionedDevices")
    is_distribution = not isinstance(devices, list)

    return ProfileFacts(
        bundle_id=bundle_id,
        team_identifier=team_id,
        team_name=profile.get("TeamName", ""),
        apns_environment=Environment.from_aps_value(
            entitlements.get("aps-environment")
        ),
        is_build_release=not bool(entitlements.get("get-task-allow", False)),
        is_distribution=is_distribution,
        provisioned_devices=frozenset() if is_distribution else frozenset(devices),
    )


def parse_profile(data: bytes) -> ProfileFacts:
    """Decode raw .mobileprovision bytes into ProfileFacts"""
    return profile_facts_from_plist(dump_prov(data))


def load_profile(profile_path: Path) -> ProfileFacts:
    """Read and decode a .mobileprovision file"""
    try:
        data = Path(profile_path).read_bytes()
    except OSError as e:
        raise ParseError(f"Could not read provisioning profile {profile_path}: {e}") from e

    facts = parse_profile(data)
    get_console().log(f"[green]Loaded provisioning profile:[/] {profile_path}")
    return facts
