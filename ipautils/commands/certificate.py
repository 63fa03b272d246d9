from ipautils.arguments import require_file
from ipautils.logger import get_console
from ipautils.src.core.errors import IpaUtilsError
from ipautils.src.core.keychain import has_identity, push_identity_name
from ipautils.src.ipa.archive import IpaArchive
from ipautils.src.ipa.provisioning_profile import load_profile


def run_certificate_command(args) -> int:
    """Entry point for the certificate command from CLI"""
    console = get_console()

    try:
        ipa_path = require_file(args.ipa_path, "ipa")

        with IpaArchive(ipa_path) as ipa:
            profile = load_profile(ipa.embedded_profile_path)

        identity_name = push_identity_name(profile)
        console.print(f"\nSearching Keychain for identity [green]{identity_name}[/]")
        found = has_identity(identity_name)
    except IpaUtilsError as e:
        console.print(f"[red]Error:[/] {e}")
        return 1

    if found:
        console.print("[green]Item found please export it from your keychain[/]")
    else:
        console.print("[red]Item couldn't be found in your keychain[/]")
    return 0
