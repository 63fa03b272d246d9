from rich.text import Text

__version__ = "0.1.0"

APP_DESCRIPTION = "Verify and resign iOS application archives"

APNS_PRODUCTION_GATEWAY = "gateway.push.apple.com:2195"
APNS_SANDBOX_GATEWAY = "gateway.sandbox.push.apple.com:2195"

DEFAULT_CONVERT_OUT = "~/Desktop/out.pem"
DEFAULT_RESIGN_OUT = "~/Desktop/resigned.ipa"


def get_banner_text() -> Text:
    """Return the styled banner shown above the help output"""
    banner = Text()
    banner.append("ipa", style="bold cyan")
    banner.append("utils", style="bold magenta")
    return banner
