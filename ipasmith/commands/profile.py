from rich.markup import escape

from ipasmith.logger import get_console
from ipasmith.src.core.errors import SigningError
from ipasmith.src.ipa.entitlements_processor import build_rule_sets, create_entitlements_file
from ipasmith.src.ipa.export_options import write_export_options_plist
from ipasmith.src.ipa.provisioning_profile_analyser import (
    dump_prov,
    get_profile_team_id,
    get_profile_uuid,
    resolve_export_method,
)
from ipasmith.src.utils.config_loader import get_entitlement_overrides, get_team_id

HANDLED_ERRORS = (SigningError, FileNotFoundError, ValueError)


def run_export_method_command(args) -> int:
    console = get_console()
    try:
        profile = dump_prov(args.profile)
    except HANDLED_ERRORS as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        return 1

    console.print(resolve_export_method(profile).value)
    return 0


def run_export_options_command(args) -> int:
    """Write the export options plist for the app described by a profile"""
    console = get_console()
    try:
        profile = dump_prov(args.profile)
        team_id = args.team_id or get_team_id() or get_profile_team_id(profile)
        if not team_id:
            console.print("[red]Error:[/] Could not determine team ID")
            return 1

        method = resolve_export_method(profile)
        console.print(f"[blue]Export method:[/] {method.value}")
        write_export_options_plist(
            args.output,
            bundle_identifier=args.bundle_id,
            provisioning_profile_uuid=get_profile_uuid(profile),
            export_method=method,
            team_id=team_id,
        )
    except HANDLED_ERRORS as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        return 1

    return 0


def run_entitlements_command(args, runner=None) -> int:
    """Merge profile and archive entitlements into a new plist"""
    console = get_console()
    try:
        profile = dump_prov(args.profile)
        rule_sets = build_rule_sets(**get_entitlement_overrides())
        entitlements = create_entitlements_file(
            args.output,
            profile,
            args.archive,
            runner=runner,
            app_name=args.app_name,
            **rule_sets,
        )
    except HANDLED_ERRORS as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        return 1

    console.print(f"\n[bold]Final entitlements ({len(entitlements)}):[/bold]")
    for key in sorted(entitlements):
        console.print(f"  • {key}")
    return 0
