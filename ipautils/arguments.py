from pathlib import Path
from typing import Optional

from ipautils.src.core.errors import InputError


def add_verify_arguments(parser):
    """Add the verify command arguments to an existing parser."""
    parser.add_argument("ipa_path", type=Path, nargs="?", help="Path to the IPA file")

    parser.add_argument(
        "--certificate",
        "-c",
        type=Path,
        help="Path of the push notification PEM certificate",
    )

    parser.add_argument(
        "--device",
        "-d",
        help="UDID of a device to look up in the embedded provisioning profile",
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when verification reports errors [default: disabled]",
    )


def add_convert_arguments(parser):
    parser.add_argument("p12_path", type=Path, nargs="?", help="Path to the .p12 file")

    parser.add_argument(
        "--out",
        "-o",
        type=Path,
        help="Output file for the PEM [default: ~/Desktop/out.pem]",
    )


def add_certificate_arguments(parser):
    parser.add_argument("ipa_path", type=Path, nargs="?", help="Path to the IPA file")


def add_resign_arguments(parser):
    parser.add_argument("ipa_path", type=Path, nargs="?", help="Path to the IPA file")

    parser.add_argument(
        "--profile",
        "-p",
        type=Path,
        help="Path of the provisioning profile to use",
    )

    parser.add_argument(
        "--out",
        "-o",
        type=Path,
        help="Output file for the resigned IPA [default: ~/Desktop/resigned.ipa]",
    )


def require_file(path: Optional[Path], title: str) -> Path:
    """Check that a required path argument was given and exists."""
    if path is None:
        raise InputError(f"Path to {title} is required")

    path = Path(path).expanduser()
    if not path.exists():
        raise InputError(f"Couldn't find {title} with path {path}")
    return path
