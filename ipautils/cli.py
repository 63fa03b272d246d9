import argparse
import sys
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme
from rich_argparse import RichHelpFormatter
from ipautils.arguments import (
    add_certificate_arguments,
    add_convert_arguments,
    add_resign_arguments,
    add_verify_arguments,
)
from ipautils.logger import get_console, set_verbose
from ipautils.src.constants.cli_constants import (
    __version__,
    get_banner_text,
    APP_DESCRIPTION,
)


class IpaUtilsHelpFormatter(RichHelpFormatter):
    """Formatter for the ipautils CLI with rich styling."""

    def __init__(self, prog):
        super().__init__(prog, max_help_position=30, width=100)
        self.console = Console(
            theme=Theme(
                {
                    "command": "bold cyan",
                    "argument": "green",
                    "option": "yellow",
                    "version": "blue",
                    "title": "bold magenta",
                }
            )
        )

    def start_section(self, heading):
        heading_text = Text(heading, style="title")
        super().start_section(str(heading_text))


def display_banner():
    """Display the ipautils banner."""
    console = get_console()
    banner = get_banner_text()

    version_info = Text(f"v{__version__}", style="blue")
    tagline = Text(APP_DESCRIPTION, style="italic")

    panel = Panel.fit(
        Text.assemble(banner, "\n", tagline, "\n", version_info),
        border_style="green",
        padding=(1, 2),
    )
    console.print(panel)


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ipautils",
        description=f"ipautils: {APP_DESCRIPTION}",
        formatter_class=IpaUtilsHelpFormatter,
    )

    parser.add_argument(
        "--version", action="version", version=f"ipautils {__version__}"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every external command that is run",
    )

    subparsers = parser.add_subparsers(dest="command")

    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify the ipa provision and signature information",
        formatter_class=IpaUtilsHelpFormatter,
        description="Check that the app build, its embedded provisioning profile, "
        "an optional push certificate and an optional device agree.",
    )
    add_verify_arguments(verify_parser)

    convert_parser = subparsers.add_parser(
        "convert",
        help="Convert a p12 to PEM",
        formatter_class=IpaUtilsHelpFormatter,
        description="Convert a PKCS#12 push certificate to PEM with openssl.",
    )
    add_convert_arguments(convert_parser)

    certificate_parser = subparsers.add_parser(
        "certificate",
        help="Find the push identity matching the ipa in the keychain",
        formatter_class=IpaUtilsHelpFormatter,
        description="Search the keychain for the push certificate the ipa needs.",
    )
    add_certificate_arguments(certificate_parser)

    resign_parser = subparsers.add_parser(
        "resign",
        help="Resign the ipa with a new provisioning profile",
        formatter_class=IpaUtilsHelpFormatter,
        description="Replace the embedded provisioning profile and sign the app again.",
    )
    add_resign_arguments(resign_parser)

    return parser


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]

    # Display the banner before the help text
    if not argv or "-h" in argv or "--help" in argv:
        display_banner()

    load_dotenv()
    parser = create_parser()
    args = parser.parse_args(argv)
    set_verbose(args.verbose)

    try:
        if args.command == "verify":
            from ipautils.commands.verify import run_verify_command

            return run_verify_command(args)
        elif args.command == "convert":
            from ipautils.commands.convert import run_convert_command

            return run_convert_command(args)
        elif args.command == "certificate":
            from ipautils.commands.certificate import run_certificate_command

            return run_certificate_command(args)
        elif args.command == "resign":
            from ipautils.commands.resign import run_resign_command

            return run_resign_command(args)
        else:
            parser.print_help()
            return 1
    except KeyboardInterrupt:
        # Working directories are already gone by the time this is reached
        get_console().print("\n[yellow]Interrupted[/]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
