from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
import shutil
from typing import Callable, Optional

from ipautils.logger import get_console
from ipautils.src.core.codesign import CodeSigner
from ipautils.src.core.errors import SigningError
from ipautils.src.core.facts import ProfileFacts
from ipautils.src.ipa.archive import IpaArchive
from ipautils.src.ipa.entitlements import write_entitlements

ENTITLEMENTS_FILE_NAME = "Entitlements.plist"


class ResignStage(Enum):
    PENDING = auto()
    UNZIPPED = auto()
    SIGNATURE_STRIPPED = auto()
    PROFILE_REPLACED = auto()
    ENTITLEMENTS_WRITTEN = auto()
    SIGNED = auto()
    ARCHIVED = auto()
    CLEANED_UP = auto()


@dataclass
class ResignContext:
    """State of a single resign run"""

    source_archive: Path
    profile_path: Path
    output_path: Path
    working_dir: Optional[Path] = None
    stage: ResignStage = ResignStage.PENDING


def signing_identity(profile: ProfileFacts) -> str:
    """Keychain identity matching the profile's team and build type"""
    build_name = "Distribution" if profile.is_build_release else "Development"
    return f"iPhone {build_name}: {profile.team_name} ({profile.team_identifier})"


class ResignPipeline:
    """Re-signs an IPA against a new provisioning profile.

    Steps run strictly in order and the first failure aborts the run. The
    working directory is removed on every exit path, including errors raised
    by any step and KeyboardInterrupt.
    """

    def __init__(
        self,
        profile: ProfileFacts,
        signer: Optional[CodeSigner] = None,
        archive_factory: Callable[[Path], IpaArchive] = IpaArchive,
        template_path: Optional[Path] = None,
    ):
        self.profile = profile
        self.signer = signer or CodeSigner()
        self.archive_factory = archive_factory
        self.template_path = template_path
        self.console = get_console()

    def run(self, context: ResignContext) -> Path:
        """Execute every step and return the path of the new archive"""
        if context.stage is not ResignStage.PENDING:
            raise ValueError("A ResignContext can only be used for a single run")

        try:
            with self.archive_factory(context.source_archive) as ipa:
                context.working_dir = ipa.working_dir
                context.stage = ResignStage.UNZIPPED

                self._strip_signature(ipa, context)
                self._replace_profile(ipa, context)
                entitlements = self._write_entitlements(ipa, context)
                self._sign(ipa, entitlements, context)
                self._archive(ipa, context)
        finally:
            if context.working_dir is not None and context.working_dir.exists():
                shutil.rmtree(context.working_dir, ignore_errors=True)
            context.stage = ResignStage.CLEANED_UP

        self.console.print(f"[green]Resigned IPA saved at:[/] {context.output_path}")
        return context.output_path

    def _strip_signature(self, ipa: IpaArchive, context: ResignContext) -> None:
        self.signer.remove_signature(ipa.app_dir)
        context.stage = ResignStage.SIGNATURE_STRIPPED

    def _replace_profile(self, ipa: IpaArchive, context: ResignContext) -> None:
        self.console.print("Copying the new provision profile to app bundle")
        shutil.copyfile(context.profile_path, ipa.embedded_profile_path)
        context.stage = ResignStage.PROFILE_REPLACED

    def _write_entitlements(self, ipa: IpaArchive, context: ResignContext) -> Path:
        self.console.print(f"Writing {ENTITLEMENTS_FILE_NAME}")
        entitlements = write_entitlements(
            self.profile,
            ipa.working_dir / ENTITLEMENTS_FILE_NAME,
            self.template_path,
        )
        context.stage = ResignStage.ENTITLEMENTS_WRITTEN
        return entitlements

    def _sign(self, ipa: IpaArchive, entitlements: Path, context: ResignContext) -> None:
        identity = signing_identity(self.profile)
        self.console.print(f"Signing [cyan]{ipa.bundle_name}[/] with {identity}")

        status = self.signer.sign(ipa.app_dir, identity, entitlements)
        if status != 0:
            raise SigningError(
                f"codesign exited with status {status} for identity '{identity}'"
            )
        context.stage = ResignStage.SIGNED

    def _archive(self, ipa: IpaArchive, context: ResignContext) -> None:
        context.output_path = ipa.pack(context.output_path)
        context.stage = ResignStage.ARCHIVED
