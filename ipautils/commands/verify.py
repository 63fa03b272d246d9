from pathlib import Path
from typing import Optional

from ipautils.arguments import require_file
from ipautils.logger import get_console
from ipautils.src.core.codesign import CodeSigner
from ipautils.src.core.consistency import evaluate
from ipautils.src.core.errors import IpaUtilsError
from ipautils.src.core.facts import CertificateFacts
from ipautils.src.core.report import VerificationReport
from ipautils.src.core.report_renderer import ArchiveSummary, ReportRenderer
from ipautils.src.ipa.archive import IpaArchive
from ipautils.src.ipa.provisioning_profile import load_profile
from ipautils.src.ipa.push_certificate import load_push_certificate


def verify_ipa(
    ipa_path: Path,
    certificate: Optional[CertificateFacts] = None,
    device: Optional[str] = None,
    signer: Optional[CodeSigner] = None,
) -> VerificationReport:
    """Unpack the IPA, evaluate it and render the report"""
    signer = signer or CodeSigner()

    with IpaArchive(ipa_path) as ipa:
        profile = load_profile(ipa.embedded_profile_path)
        signature_valid = signer.verify(ipa.app_dir)

    report = evaluate(profile, certificate, device)
    ReportRenderer().render(
        report, ArchiveSummary(profile=profile, signature_valid=signature_valid)
    )
    return report


def run_verify_command(args) -> int:
    """Entry point for the verify command from CLI"""
    console = get_console()

    try:
        ipa_path = require_file(args.ipa_path, "ipa")
        certificate = None
        if args.certificate is not None:
            certificate = load_push_certificate(
                require_file(args.certificate, "certificate")
            )

        report = verify_ipa(ipa_path, certificate, args.device)
    except IpaUtilsError as e:
        console.print(f"[red]Error:[/] {e}")
        return 1

    # Findings are reported as text; only --strict turns them into an exit status
    if args.strict and not report.passed:
        return 1
    return 0
