import argparse
import sys
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich_argparse import RichHelpFormatter
from ipasmith import __version__
from ipasmith.arguments import (
    add_build_arguments,
    add_certificate_arguments,
    add_entitlements_arguments,
    add_export_options_arguments,
    add_profile_argument,
    add_resign_arguments,
)

APP_DESCRIPTION = "Validate, export and resign iOS app packages"


class IpaSmithHelpFormatter(RichHelpFormatter):
    """Formatter for the ipasmith CLI with rich styling."""

    styles = {
        **RichHelpFormatter.styles,
        "argparse.args": "green",
        "argparse.groups": "bold magenta",
        "argparse.metavar": "yellow",
    }

    def __init__(self, prog):
        super().__init__(prog, max_help_position=30, width=100)


def display_banner():
    console = Console()
    panel = Panel.fit(
        Text.assemble(
            Text("ipasmith", style="bold green"),
            "\n",
            Text(APP_DESCRIPTION, style="italic"),
            "\n",
            Text(f"v{__version__}", style="blue"),
        ),
        border_style="green",
        padding=(1, 2),
    )
    console.print(panel)


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ipasmith",
        description=f"ipasmith: {APP_DESCRIPTION}",
        formatter_class=IpaSmithHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version=f"ipasmith {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command")

    fingerprint_parser = subparsers.add_parser(
        "fingerprint",
        help="Print the SHA-1 fingerprint of a .p12 certificate",
        formatter_class=IpaSmithHelpFormatter,
    )
    add_certificate_arguments(fingerprint_parser)

    validate_parser = subparsers.add_parser(
        "validate-cert",
        help="Check a .p12 certificate is a codesigning identity of the team",
        formatter_class=IpaSmithHelpFormatter,
    )
    add_certificate_arguments(validate_parser, require_team=True)

    method_parser = subparsers.add_parser(
        "export-method",
        help="Print the export method implied by a provisioning profile",
        formatter_class=IpaSmithHelpFormatter,
    )
    add_profile_argument(method_parser, positional=True)

    options_parser = subparsers.add_parser(
        "export-options",
        help="Write an export options plist",
        formatter_class=IpaSmithHelpFormatter,
    )
    add_export_options_arguments(options_parser)

    entitlements_parser = subparsers.add_parser(
        "entitlements",
        help="Merge profile and archive entitlements",
        formatter_class=IpaSmithHelpFormatter,
    )
    add_entitlements_arguments(entitlements_parser)

    build_parser = subparsers.add_parser(
        "build-ipa",
        help="Export an .xcarchive to an IPA",
        formatter_class=IpaSmithHelpFormatter,
    )
    add_build_arguments(build_parser)

    resign_parser = subparsers.add_parser(
        "resign",
        help="Resign an IPA with new entitlements and profile",
        formatter_class=IpaSmithHelpFormatter,
    )
    add_resign_arguments(resign_parser)

    return parser


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if not argv or "-h" in argv or "--help" in argv:
        display_banner()

    load_dotenv()

    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command == "fingerprint":
        from ipasmith.commands.certificate import run_fingerprint_command

        return run_fingerprint_command(args)
    elif args.command == "validate-cert":
        from ipasmith.commands.certificate import run_validate_cert_command

        return run_validate_cert_command(args)
    elif args.command == "export-method":
        from ipasmith.commands.profile import run_export_method_command

        return run_export_method_command(args)
    elif args.command == "export-options":
        from ipasmith.commands.profile import run_export_options_command

        return run_export_options_command(args)
    elif args.command == "entitlements":
        from ipasmith.commands.profile import run_entitlements_command

        return run_entitlements_command(args)
    elif args.command == "build-ipa":
        from ipasmith.commands.package import run_build_ipa_command

        return run_build_ipa_command(args)
    elif args.command == "resign":
        from ipasmith.commands.package import run_resign_command

        return run_resign_command(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
