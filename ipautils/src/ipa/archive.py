import os
from pathlib import Path
import shutil
import stat
import tempfile
import zipfile
from typing import Optional

from ipautils.logger import get_console
from ipautils.src.core.errors import ArchiveError

EMBEDDED_PROFILE_NAME = "embedded.mobileprovision"


def _unix_mode(info: zipfile.ZipInfo) -> int:
    return info.external_attr >> 16


class IpaArchive:
    """Extracts an IPA into a private working directory for the duration of a block.

    The working directory is removed when the block exits, whatever the outcome.
    The source archive is only ever read. Unix permission bits and symlinks stored
    in the archive survive both extraction and packing.
    """

    def __init__(self, ipa_path: Path):
        self.ipa_path = Path(ipa_path)
        self.working_dir: Optional[Path] = None
        self.app_dir: Optional[Path] = None
        self.console = get_console()

    def __enter__(self):
        """Extract IPA to a temporary directory"""
        self.working_dir = Path(tempfile.mkdtemp(prefix="ipautils-"))
        try:
            self._extract()
        except BaseException:
            self.cleanup()
            raise
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cleanup()

    def _extract(self) -> None:
        try:
            with zipfile.ZipFile(self.ipa_path) as zf:
                for info in zf.infolist():
                    self._extract_member(zf, info)
        except (zipfile.BadZipFile, OSError) as e:
            raise ArchiveError(f"Could not unpack {self.ipa_path}: {e}") from e

        payload_dir = self.working_dir / "Payload"
        self.app_dir = next(iter(sorted(payload_dir.glob("*.app"))), None)
        if self.app_dir is None:
            raise ArchiveError(f"No Payload/*.app bundle found in {self.ipa_path}")

        self.console.log(f"[blue]Unpacked[/] {self.ipa_path.name} -> {self.app_dir.name}")

    def _extract_member(self, zf: zipfile.ZipFile, info: zipfile.ZipInfo) -> None:
        mode = _unix_mode(info)

        if stat.S_ISLNK(mode):
            member = Path(info.filename)
            if member.is_absolute() or ".." in member.parts:
                raise ArchiveError(f"Refusing to extract unsafe entry {info.filename}")
            link = self.working_dir / member
            link.parent.mkdir(parents=True, exist_ok=True)
            os.symlink(zf.read(info).decode("utf-8"), link)
            return

        extracted = zf.extract(info, self.working_dir)
        # Directories keep their default mode so the tree stays traversable
        if mode & 0o7777 and not info.is_dir():
            os.chmod(extracted, mode & 0o7777)

    @property
    def bundle_name(self) -> str:
        return self.app_dir.name

    @property
    def embedded_profile_path(self) -> Path:
        return self.app_dir / EMBEDDED_PROFILE_NAME

    def pack(self, output_path: Path) -> Path:
        """Zip the Payload directory into output_path.

        When output_path is an existing directory the archive is written
        inside it as `<source stem>-resigned.ipa`.
        """
        output_path = Path(output_path).expanduser()
        if output_path.is_dir():
            output_path = output_path / f"{self.ipa_path.stem}-resigned.ipa"
        output_path.parent.mkdir(parents=True, exist_ok=True)

        # Build inside the working dir so a failed zip leaves nothing behind
        packed = self.working_dir / "packed.zip"
        try:
            with zipfile.ZipFile(packed, "w", zipfile.ZIP_DEFLATED) as zf:
                self._write_payload(zf)
            shutil.move(str(packed), str(output_path))
        except OSError as e:
            raise ArchiveError(f"Could not write {output_path}: {e}") from e

        self.console.log(f"[green]Archive written:[/] {output_path}")
        return output_path

    def _write_payload(self, zf: zipfile.ZipFile) -> None:
        payload_dir = self.working_dir / "Payload"
        zf.write(payload_dir, "Payload")

        # os.walk does not descend into symlinked directories, they are stored as links
        for root, dirnames, filenames in os.walk(payload_dir):
            dirnames.sort()
            for name in dirnames + sorted(filenames):
                path = Path(root) / name
                arcname = path.relative_to(self.working_dir).as_posix()
                if path.is_symlink():
                    info = zipfile.ZipInfo(arcname)
                    info.create_system = 3
                    info.external_attr = (stat.S_IFLNK | 0o755) << 16
                    zf.writestr(info, os.readlink(path))
                else:
                    zf.write(path, arcname)

    def cleanup(self) -> None:
        """Remove the working directory"""
        if self.working_dir and self.working_dir.exists():
            shutil.rmtree(self.working_dir, ignore_errors=True)
