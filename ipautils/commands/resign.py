from pathlib import Path

from ipautils.arguments import require_file
from ipautils.logger import get_console
from ipautils.src.core.errors import InputError, IpaUtilsError
from ipautils.src.core.resign_pipeline import ResignContext, ResignPipeline
from ipautils.src.ipa.provisioning_profile import load_profile
from ipautils.src.utils.config_loader import (
    get_entitlements_template,
    get_resign_out,
)


def run_resign_command(args) -> int:
    """Entry point for the resign command from CLI"""
    console = get_console()
    console.print()

    try:
        ipa_path = require_file(args.ipa_path, "ipa")
        if args.profile is None:
            raise InputError("pass a profile with -p profile-path")
        profile_path = require_file(args.profile, "provision profile")

        output_path = Path(args.out or get_resign_out()).expanduser()
        if output_path.resolve() == ipa_path.resolve():
            raise InputError("Output path must differ from the source ipa")

        context = ResignContext(
            source_archive=ipa_path,
            profile_path=profile_path,
            output_path=output_path,
        )
        pipeline = ResignPipeline(
            load_profile(profile_path),
            template_path=get_entitlements_template(),
        )
        pipeline.run(context)
    except (IpaUtilsError, OSError) as e:
        console.print(f"[red]Error:[/] {e}")
        return 1

    return 0
