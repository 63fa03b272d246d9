from dataclasses import dataclass
from typing import Optional

from rich.console import Console
from rich.markup import escape

from ipautils.logger import get_console
from ipautils.src.core.facts import ProfileFacts
from ipautils.src.core.report import Check, VerificationReport

SECTION_TITLES = {
    Check.ENVIRONMENT: "Checking embedded provision profile APNS entitlement vs app environment",
    Check.CERTIFICATE: "Checking certificates",
    Check.DEVICE: "Checking provisioned devices",
}


@dataclass(frozen=True)
class ArchiveSummary:
    """General information printed above the findings"""

    profile: ProfileFacts
    signature_valid: Optional[bool] = None


class ReportRenderer:
    def __init__(self, console: Optional[Console] = None):
        self.console = console or get_console()

    def render_summary(self, summary: ArchiveSummary) -> None:
        profile = summary.profile
        self.console.print("Reading general information")
        self.console.print(f"Application Bundle ID: [green]{escape(profile.bundle_id)}[/]")
        self.console.print(f"APNS Environment: [green]{profile.apns_environment.value}[/]")
        self.console.print(f"App Environment: [green]{profile.build_environment}[/]")

        if summary.signature_valid is not None:
            status = "[green]Valid[/]" if summary.signature_valid else "[red]Invalid[/]"
            self.console.print(f"\nVerifying bundle signature: {status}")

    def render(
        self, report: VerificationReport, summary: Optional[ArchiveSummary] = None
    ) -> None:
        """Print the report, one section per check"""
        self.console.print()
        if summary is not None:
            self.render_summary(summary)

        current_check = None
        for finding in report.findings:
            if finding.check is not current_check:
                current_check = finding.check
                self.console.print(f"\n[bold]{SECTION_TITLES[current_check]}[/]")

            style = "red" if finding.is_error else "green"
            self.console.print(f"[{style}]{escape(finding.message)}[/]")

        self.console.print()
        if report.passed:
            self.console.print("[bold green]No errors encountered[/]")
        else:
            self.console.print(f"[bold red]{report.error_count} errors encountered![/]")
