from typing import List, Optional

from ipautils.src.core.facts import CertificateFacts, Environment, ProfileFacts
from ipautils.src.core.report import Check, Finding, Severity, VerificationReport


def _info(check: Check, message: str) -> Finding:
    return Finding(message=message, severity=Severity.INFO, check=check)


def _error(check: Check, message: str) -> Finding:
    return Finding(message=message, severity=Severity.ERROR, check=check)


def is_same_environment(profile: ProfileFacts) -> bool:
    """A debug build (get-task-allow) only agrees with a Development aps-environment"""
    is_debug_build = not profile.is_build_release
    is_sandbox_push = profile.apns_environment is Environment.DEVELOPMENT
    return is_sandbox_push == is_debug_build


def check_environment(profile: ProfileFacts) -> List[Finding]:
    """Compare the build type against the aps-environment entitlement"""
    if is_same_environment(profile):
        return [
            _info(
                Check.ENVIRONMENT,
                "Is App and APNS on same environment: Yes "
                f"(APNS connection gateway: {profile.apns_gateway})",
            )
        ]

    task_allow = "false (Release)" if profile.is_build_release else "true (Debug)"
    return [
        _info(Check.ENVIRONMENT, "Is App and APNS on same environment: No"),
        _error(
            Check.ENVIRONMENT,
            f"The application was built with get-task-allow set to {task_allow} "
            f"while the aps-environment is set to {profile.apns_environment.value}. "
            "To fix this issue regenerate the provisioning profile from the Apple "
            "developer portal with a matching aps-environment, then rebuild the app "
            "using it",
        ),
    ]


def check_certificate(
    profile: ProfileFacts, certificate: CertificateFacts
) -> List[Finding]:
    """Match a push certificate against the profile's bundle ID and environment"""
    if not certificate.is_apns:
        return [
            _error(Check.CERTIFICATE, "The passed certificate is not an APNS certificate")
        ]

    findings = [
        _info(Check.CERTIFICATE, f"Certificate name: {certificate.name}"),
        _info(
            Check.CERTIFICATE,
            f"Certificate environment: {certificate.environment.value}",
        ),
        _info(Check.CERTIFICATE, f"Certificate bundle ID: {certificate.bundle_id}"),
    ]

    if profile.bundle_id == certificate.bundle_id:
        findings.append(
            _info(Check.CERTIFICATE, "Certificate bundle ID identical to app: Yes")
        )
    else:
        findings.append(
            _error(
                Check.CERTIFICATE,
                f"Certificate bundle ID {certificate.bundle_id} does not match "
                f"the app bundle ID {profile.bundle_id}",
            )
        )

    if certificate.is_production == profile.is_apns_production:
        findings.append(
            _info(
                Check.CERTIFICATE,
                "Is provided certificate correct for passed ipa: Yes",
            )
        )
    else:
        env = certificate.environment.value
        findings.append(
            _error(
                Check.CERTIFICATE,
                "The application was built with a provisioning profile containing "
                f"aps-environment in {profile.apns_environment.value} environment "
                f"while the passed certificate environment is set to {env}. "
                f"To fix this issue either export the correct iOS Push {env} "
                "certificate from keychain or rebuild your app with the correct "
                "provisioning profile",
            )
        )

    return findings


def check_device(profile: ProfileFacts, device_udid: str) -> List[Finding]:
    """Look up a device UDID in the profile's provisioned devices"""
    if profile.is_distribution:
        return [
            _error(Check.DEVICE, "Distribution builds carry no provisioned device list")
        ]

    findings = [
        _info(
            Check.DEVICE,
            f"Embedded profile contains {len(profile.provisioned_devices)} devices",
        )
    ]
    if device_udid in profile.provisioned_devices:
        findings.append(_info(Check.DEVICE, f"Device with UDID {device_udid} found"))
    else:
        findings.append(
            _error(Check.DEVICE, f"Device with UDID {device_udid} not found")
        )
    return findings


def evaluate(
    profile: ProfileFacts,
    certificate: Optional[CertificateFacts] = None,
    device_udid: Optional[str] = None,
) -> VerificationReport:
    """Run every applicable consistency check and collect the findings.

    Checks are independent: a failing certificate check does not stop the
    device check. Inconsistencies are reported as Error findings, this
    function itself never raises on them.
    """
    findings = check_environment(profile)

    if certificate is not None:
        findings.extend(check_certificate(profile, certificate))

    if device_udid is not None:
        findings.extend(check_device(profile, device_udid))

    return VerificationReport(findings=tuple(findings))
