from rich.markup import escape

from ipasmith.logger import get_console
from ipasmith.src.core.errors import SigningError
from ipasmith.src.core.ipa_builder import (
    BuildOptions,
    FastlaneCredentials,
    ResignOptions,
    build_ipa,
    resign_ipa,
)
from ipasmith.src.ipa.provisioning_profile_analyser import (
    dump_prov,
    get_profile_team_id,
    resolve_export_method,
)
from ipasmith.src.utils.config_loader import (
    get_fastlane_credentials,
    get_keychain_path,
    get_scheme,
)

HANDLED_ERRORS = (SigningError, FileNotFoundError, ValueError)


def _credentials(args, profile) -> FastlaneCredentials:
    creds = get_fastlane_credentials(args.team_id)
    team_id = creds["team_id"] or get_profile_team_id(profile)
    if not team_id:
        raise ValueError("Could not determine team ID")
    return FastlaneCredentials(team_id=team_id, password=creds["password"])


def _keychain(args) -> str:
    keychain = args.keychain or get_keychain_path()
    if not keychain:
        raise ValueError(
            "No keychain given. Pass --keychain or set [signing] keychain_path in the config"
        )
    return keychain


def run_build_ipa_command(args, runner=None) -> int:
    console = get_console()
    try:
        profile = dump_prov(args.profile)
        options = BuildOptions(
            ipa_path=args.ipa_path,
            archive_path=args.archive,
            export_options_plist_path=args.export_options,
            keychain_path=_keychain(args),
            export_method=resolve_export_method(profile),
            workspace=args.workspace,
            code_sign_identity=args.identity,
            scheme=args.scheme or get_scheme(),
        )
        build_ipa(options, _credentials(args, profile), runner, client=args.client)
    except HANDLED_ERRORS as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        return 1

    return 0


def run_resign_command(args, runner=None) -> int:
    console = get_console()
    if not args.source_ipa.exists():
        console.print(f"[red]Error:[/] IPA file not found: {args.source_ipa}")
        return 1

    try:
        profile = dump_prov(args.profile)
        options = ResignOptions(
            source_ipa_path=args.source_ipa,
            dest_ipa_path=args.dest_ipa,
            entitlements_path=args.entitlements,
            provisioning_profile_path=args.profile,
            code_sign_identity=args.identity,
            keychain_path=_keychain(args),
        )
        resign_ipa(options, _credentials(args, profile), runner)
    except HANDLED_ERRORS as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        return 1

    return 0
