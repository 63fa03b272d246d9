from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet

from ipautils.src.constants.cli_constants import (
    APNS_PRODUCTION_GATEWAY,
    APNS_SANDBOX_GATEWAY,
)


class Environment(Enum):
    PRODUCTION = "Production"
    DEVELOPMENT = "Development"

    @classmethod
    def from_aps_value(cls, value) -> "Environment":
        """Map an aps-environment entitlement value to an Environment"""
        # Anything other than "production" (including a missing key) is the sandbox
        if isinstance(value, str) and value.lower() == "production":
            return cls.PRODUCTION
        return cls.DEVELOPMENT


@dataclass(frozen=True)
class ProfileFacts:
    """Normalized view of a provisioning profile's entitlements"""

    bundle_id: str
    team_identifier: str
    team_name: str
    apns_environment: Environment
    is_build_release: bool  # inverse of get-task-allow
    is_distribution: bool  # no ProvisionedDevices in the profile
    provisioned_devices: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_apns_production(self) -> bool:
        return self.apns_environment is Environment.PRODUCTION

    @property
    def build_environment(self) -> str:
        return "Release" if self.is_build_release else "Debug"

    @property
    def apns_gateway(self) -> str:
        if self.is_apns_production:
            return APNS_PRODUCTION_GATEWAY
        return APNS_SANDBOX_GATEWAY


@dataclass(frozen=True)
class CertificateFacts:
    """Normalized view of a push notification certificate"""

    is_apns: bool
    name: str
    bundle_id: str
    environment: Environment  # only meaningful when is_apns

    @property
    def is_production(self) -> bool:
        return self.environment is Environment.PRODUCTION
