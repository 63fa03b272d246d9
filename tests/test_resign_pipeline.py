import plistlib
import stat
import zipfile
from pathlib import Path

import pytest

from conftest import make_profile, write_ipa
from ipautils.src.core.errors import ArchiveError, EntitlementsIOError, SigningError
from ipautils.src.core.facts import Environment
from ipautils.src.core.resign_pipeline import (
    ResignContext,
    ResignPipeline,
    ResignStage,
    signing_identity,
)


class FakeSigner:
    def __init__(self, status: int = 0):
        self.status = status
        self.calls = []
        self.entitlements = None

    def remove_signature(self, app_dir: Path) -> None:
        self.calls.append(("remove_signature", app_dir.name))
        (app_dir / "_CodeSignature" / "CodeResources").unlink()
        (app_dir / "_CodeSignature").rmdir()

    def sign(self, bundle: Path, identity: str, entitlements: Path) -> int:
        self.calls.append(("sign", bundle.name, identity))
        self.entitlements = plistlib.loads(entitlements.read_bytes())
        return self.status

    def verify(self, bundle: Path) -> bool:
        return True


@pytest.fixture
def resign_inputs(tmp_path):
    source = write_ipa(tmp_path / "app.ipa", b"old profile")
    new_profile = tmp_path / "new.mobileprovision"
    new_profile.write_bytes(b"new profile")
    return source, new_profile, tmp_path / "out" / "resigned.ipa"


def test_signing_identity_distribution_and_development() -> None:
    assert (
        signing_identity(make_profile(is_build_release=True))
        == "iPhone Distribution: Example Team (TEAM123456)"
    )
    assert (
        signing_identity(make_profile(is_build_release=False))
        == "iPhone Development: Example Team (TEAM123456)"
    )


def test_resign_produces_archive_and_cleans_up(resign_inputs) -> None:
    source, new_profile, output = resign_inputs
    source_bytes = source.read_bytes()
    signer = FakeSigner()
    context = ResignContext(source, new_profile, output)

    result = ResignPipeline(make_profile(), signer=signer).run(context)

    assert result == output
    assert context.stage is ResignStage.CLEANED_UP
    assert not context.working_dir.exists()
    assert source.read_bytes() == source_bytes

    with zipfile.ZipFile(output) as zf:
        names = zf.namelist()
        assert zf.read("Payload/DummyApp.app/embedded.mobileprovision") == b"new profile"
    assert not any("_CodeSignature" in name for name in names)
    assert not any(name.endswith("Entitlements.plist") for name in names)

    assert signer.calls == [
        ("remove_signature", "DummyApp.app"),
        ("sign", "DummyApp.app", "iPhone Distribution: Example Team (TEAM123456)"),
    ]
    assert signer.entitlements == {
        "application-identifier": "TEAM123456.com.x.y",
        "get-task-allow": False,
    }


def test_debug_profile_allows_task(resign_inputs) -> None:
    source, new_profile, output = resign_inputs
    signer = FakeSigner()
    profile = make_profile(is_build_release=False, apns_environment=Environment.DEVELOPMENT)

    ResignPipeline(profile, signer=signer).run(ResignContext(source, new_profile, output))

    assert signer.entitlements["get-task-allow"] is True
    assert signer.calls[-1][2].startswith("iPhone Development:")


def test_signing_failure_raises_and_removes_working_dir(resign_inputs) -> None:
    source, new_profile, output = resign_inputs
    context = ResignContext(source, new_profile, output)

    with pytest.raises(SigningError):
        ResignPipeline(make_profile(), signer=FakeSigner(status=1)).run(context)

    assert context.working_dir is not None
    assert not context.working_dir.exists()
    assert context.stage is ResignStage.CLEANED_UP
    assert not output.exists()


def test_unreadable_template_raises_and_cleans_up(resign_inputs, tmp_path) -> None:
    source, new_profile, output = resign_inputs
    context = ResignContext(source, new_profile, output)
    pipeline = ResignPipeline(
        make_profile(), signer=FakeSigner(), template_path=tmp_path / "missing.plist"
    )

    with pytest.raises(EntitlementsIOError):
        pipeline.run(context)

    assert not context.working_dir.exists()
    assert context.stage is ResignStage.CLEANED_UP


def test_interrupt_still_cleans_up(resign_inputs) -> None:
    source, new_profile, output = resign_inputs
    context = ResignContext(source, new_profile, output)

    class InterruptedSigner(FakeSigner):
        def sign(self, bundle, identity, entitlements):
            raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        ResignPipeline(make_profile(), signer=InterruptedSigner()).run(context)

    assert not context.working_dir.exists()


def test_corrupt_archive_raises_archive_error(tmp_path) -> None:
    source = tmp_path / "broken.ipa"
    source.write_bytes(b"not a zip")
    profile = tmp_path / "new.mobileprovision"
    profile.write_bytes(b"p")
    context = ResignContext(source, profile, tmp_path / "out.ipa")

    with pytest.raises(ArchiveError):
        ResignPipeline(make_profile(), signer=FakeSigner()).run(context)

    assert context.working_dir is None
    assert context.stage is ResignStage.CLEANED_UP


def test_context_cannot_be_reused(resign_inputs) -> None:
    source, new_profile, output = resign_inputs
    context = ResignContext(source, new_profile, output)
    pipeline = ResignPipeline(make_profile(), signer=FakeSigner())
    pipeline.run(context)

    with pytest.raises(ValueError):
        pipeline.run(context)


def _add_entry(ipa: Path, name: str, data: bytes, mode: int) -> None:
    info = zipfile.ZipInfo(name)
    info.create_system = 3
    info.external_attr = mode << 16
    with zipfile.ZipFile(ipa, "a") as zf:
        zf.writestr(info, data)


def test_executable_and_symlink_entries_survive_resign(tmp_path) -> None:
    source = tmp_path / "app.ipa"
    with zipfile.ZipFile(source, "w") as zf:
        zf.writestr("Payload/DummyApp.app/_CodeSignature/CodeResources", b"old signature")
        zf.writestr("Payload/DummyApp.app/embedded.mobileprovision", b"old profile")
    _add_entry(source, "Payload/DummyApp.app/DummyApp", b"\xcf\xfa\xed\xfe", 0o100755)
    _add_entry(
        source,
        "Payload/DummyApp.app/Frameworks/Kit.framework/Versions/A/Kit",
        b"\xcf\xfa\xed\xfe",
        0o100755,
    )
    _add_entry(
        source,
        "Payload/DummyApp.app/Frameworks/Kit.framework/Kit",
        b"Versions/A/Kit",
        0o120755,
    )
    new_profile = tmp_path / "new.mobileprovision"
    new_profile.write_bytes(b"new profile")
    output = tmp_path / "resigned.ipa"

    ResignPipeline(make_profile(), signer=FakeSigner()).run(
        ResignContext(source, new_profile, output)
    )

    with zipfile.ZipFile(output) as zf:
        binary = zf.getinfo("Payload/DummyApp.app/DummyApp")
        nested = zf.getinfo("Payload/DummyApp.app/Frameworks/Kit.framework/Versions/A/Kit")
        link = zf.getinfo("Payload/DummyApp.app/Frameworks/Kit.framework/Kit")
        link_target = zf.read(link)

    assert (binary.external_attr >> 16) & 0o111 == 0o111
    assert (nested.external_attr >> 16) & 0o111 == 0o111
    assert stat.S_ISLNK(link.external_attr >> 16)
    assert link_target == b"Versions/A/Kit"


def test_output_directory_receives_named_archive(resign_inputs, tmp_path) -> None:
    source, new_profile, _ = resign_inputs
    out_dir = tmp_path / "outdir"
    out_dir.mkdir()
    context = ResignContext(source, new_profile, out_dir)

    result = ResignPipeline(make_profile(), signer=FakeSigner()).run(context)

    assert result == out_dir / "app-resigned.ipa"
    assert context.output_path == result
    assert zipfile.is_zipfile(result)
