from ipautils.arguments import require_file
from ipautils.logger import get_console
from ipautils.src.core.errors import IpaUtilsError
from ipautils.src.ipa.pkcs12 import convert_p12_to_pem
from ipautils.src.utils.config_loader import get_convert_out


def run_convert_command(args) -> int:
    """Entry point for the convert command from CLI"""
    console = get_console()

    try:
        p12_path = require_file(args.p12_path, "p12")
        out_path = args.out or get_convert_out()

        console.print("\nConverting P12 to Pem")
        pem_path = convert_p12_to_pem(p12_path, out_path)
    except IpaUtilsError as e:
        console.print(f"[red]Error:[/] {e}")
        return 1

    console.print(f"Pem saved at [green]{pem_path}[/]")
    return 0
