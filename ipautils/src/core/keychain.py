import re
import subprocess
from typing import List

from ipautils.logger import log_command
from ipautils.src.core.errors import KeychainError
from ipautils.src.core.facts import ProfileFacts
from ipautils.src.utils.config_loader import get_tool

_IDENTITY_LINE_RE = re.compile(r'^\s*\d+\)\s+[0-9A-Fa-f]{40}\s+"(.+)"')


def push_identity_name(profile: ProfileFacts) -> str:
    """Name of the push identity Apple issues for the profile's bundle ID"""
    environment = "Production" if profile.is_apns_production else "Development"
    return f"Apple {environment} IOS Push Services: {profile.bundle_id}"


def parse_identities(output: str) -> List[str]:
    """Extract identity names from `security find-identity` output"""
    names = []
    for line in output.splitlines():
        if match := _IDENTITY_LINE_RE.match(line):
            names.append(match.group(1))
    return names


def find_identities(policy: str = "ssl-client") -> List[str]:
    """List valid keychain identities for a policy"""
    cmd = [get_tool("security"), "find-identity", "-v", "-p", policy]
    log_command(cmd)

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=True)
    except (subprocess.CalledProcessError, OSError) as e:
        stderr = getattr(e, "stderr", "") or str(e)
        raise KeychainError(f"Could not list keychain identities: {stderr}") from e

    return parse_identities(result.stdout)


def has_identity(name: str, policy: str = "ssl-client") -> bool:
    return any(name in identity for identity in find_identities(policy))
