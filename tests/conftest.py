import plistlib
import zipfile
from pathlib import Path

import pytest
from asn1crypto import cms

from ipautils.src.core.facts import Environment, ProfileFacts


def make_profile(**overrides) -> ProfileFacts:
    values = dict(
        bundle_id="com.x.y",
        team_identifier="TEAM123456",
        team_name="Example Team",
        apns_environment=Environment.PRODUCTION,
        is_build_release=True,
        is_distribution=True,
        provisioned_devices=frozenset(),
    )
    values.update(overrides)
    return ProfileFacts(**values)


def profile_plist(
    *,
    aps_environment="production",
    get_task_allow=False,
    devices=None,
    team_id="TEAM123456",
    bundle_id="com.x.y",
) -> dict:
    entitlements = {
        "application-identifier": f"{team_id}.{bundle_id}",
        "com.apple.developer.team-identifier": team_id,
        "get-task-allow": get_task_allow,
    }
    if aps_environment is not None:
        entitlements["aps-environment"] = aps_environment

    profile = {
        "Name": "Example Profile",
        "TeamName": "Example Team",
        "TeamIdentifier": [team_id],
        "Entitlements": entitlements,
    }
    if devices is not None:
        profile["ProvisionedDevices"] = list(devices)
    return profile


def wrap_in_cms(plist: dict) -> bytes:
    """Encode a profile dict the way a .mobileprovision stores it (unsigned)"""
    signed_data = cms.SignedData(
        {
            "version": "v1",
            "digest_algorithms": [],
            "encap_content_info": {
                "content_type": "data",
                "content": plistlib.dumps(plist),
            },
            "signer_infos": [],
        }
    )
    return cms.ContentInfo({"content_type": "signed_data", "content": signed_data}).dump()


def write_ipa(path: Path, profile_bytes: bytes = b"", app_name="DummyApp.app") -> Path:
    """Create a minimal IPA with an already signed app bundle"""
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr(f"Payload/{app_name}/Info.plist", plistlib.dumps({"CFBundleIdentifier": "com.x.y"}))
        zf.writestr(f"Payload/{app_name}/DummyApp", b"\xcf\xfa\xed\xfe")
        zf.writestr(f"Payload/{app_name}/_CodeSignature/CodeResources", b"old signature")
        zf.writestr(f"Payload/{app_name}/embedded.mobileprovision", profile_bytes)
    return path


@pytest.fixture
def ipa_factory(tmp_path):
    def _factory(plist=None, name="app.ipa"):
        profile_bytes = wrap_in_cms(plist or profile_plist())
        return write_ipa(tmp_path / name, profile_bytes)

    return _factory


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    # Never read the developer's real ~/.ipautils/config.toml
    monkeypatch.setenv("IPAUTILS_CONFIG", str(tmp_path / "missing-config.toml"))
    for key in ("IPAUTILS_CONVERT_OUT", "IPAUTILS_RESIGN_OUT", "IPAUTILS_ENTITLEMENTS_TEMPLATE"):
        monkeypatch.delenv(key, raising=False)
