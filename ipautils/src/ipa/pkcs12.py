from pathlib import Path
import subprocess

from ipautils.logger import log_command
from ipautils.src.core.errors import ConversionError
from ipautils.src.utils.config_loader import get_tool


def convert_p12_to_pem(p12_path: Path, out_path: Path) -> Path:
    """Convert a PKCS#12 bundle to an unencrypted PEM (client cert + key)"""
    out_path = Path(out_path).expanduser()
    out_path.parent.mkdir(parents=True, exist_ok=True)

    cmd = [
        get_tool("openssl"),
        "pkcs12",
        "-in",
        str(p12_path),
        "-out",
        str(out_path),
        "-nodes",
        "-clcerts",
    ]
    log_command(cmd)

    # openssl prompts for the import password on the terminal, so stdin stays attached
    try:
        result = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True)
    except OSError as e:
        raise ConversionError(f"Could not run openssl: {e}") from e

    if result.returncode != 0:
        raise ConversionError(
            f"openssl pkcs12 failed with status {result.returncode}\n{result.stderr}"
        )
    return out_path
