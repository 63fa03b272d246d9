from pathlib import Path
import shutil
import subprocess

from ipautils.logger import get_console, log_command
from ipautils.src.utils.config_loader import get_tool


class CodeSigner:
    """Thin wrapper around codesign"""

    def __init__(self, codesign: str = None):
        self.console = get_console()
        self.codesign = codesign or get_tool("codesign")

    def remove_signature(self, app_dir: Path) -> None:
        """Delete the bundle's existing signature"""
        signature_dir = Path(app_dir) / "_CodeSignature"
        if signature_dir.exists():
            shutil.rmtree(signature_dir)
            self.console.log(f"[yellow]Removed old signature:[/] {signature_dir}")

    def sign(self, bundle: Path, identity: str, entitlements: Path) -> int:
        """Sign a bundle, replacing any existing signature. Returns the exit status."""
        cmd = [
            self.codesign,
            "-f",
            "-s",
            identity,
            "--entitlements",
            str(entitlements),
            str(bundle),
        ]
        log_command(cmd)

        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            self.console.log(f"[red]Could not run codesign:[/] {e}")
            return 127

        if result.returncode != 0:
            self.console.log(f"[red]Codesign failed:[/]\nStderr: {result.stderr}")
        return result.returncode

    def verify(self, bundle: Path) -> bool:
        """Check the bundle signature with codesign --verify"""
        cmd = [self.codesign, "--verify", "--deep", "--strict", str(bundle)]
        log_command(cmd)

        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            self.console.log(f"[red]Could not run codesign:[/] {e}")
            return False

        if result.returncode != 0:
            self.console.log(f"[red]Signature verification failed:[/] {result.stderr}")
        return result.returncode == 0
