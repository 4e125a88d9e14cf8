from pathlib import Path


def add_certificate_arguments(parser, require_team: bool = False):
    """Add the arguments identifying a PKCS#12 certificate."""
    parser.add_argument("cert_path", type=Path, help="Path to the .p12 certificate")
    parser.add_argument(
        "--password",
        type=str,
        default=None,
        help="Certificate password [default: empty]",
    )
    if require_team:
        parser.add_argument(
            "--team-id",
            type=str,
            help="Apple Developer team identifier [default: from config]",
        )


def add_profile_argument(parser, positional: bool = False):
    if positional:
        parser.add_argument(
            "profile", type=Path, help="Path to the .mobileprovision file"
        )
    else:
        parser.add_argument(
            "--profile",
            type=Path,
            required=True,
            help="Path to the .mobileprovision file",
        )


def add_export_options_arguments(parser):
    parser.add_argument("output", type=Path, help="Where to write the plist")
    add_profile_argument(parser)
    parser.add_argument(
        "--bundle-id", type=str, required=True, help="Bundle identifier of the app"
    )
    parser.add_argument(
        "--team-id",
        type=str,
        help="Team identifier [default: from config, then from the profile]",
    )


def add_entitlements_arguments(parser):
    parser.add_argument("output", type=Path, help="Where to write the entitlements")
    add_profile_argument(parser)
    parser.add_argument(
        "--archive", type=Path, required=True, help="Path to the .xcarchive"
    )
    parser.add_argument(
        "--app-name",
        type=str,
        default="ExpoKitApp",
        help="Name of the .app inside the archive [default: ExpoKitApp]",
    )


def add_build_arguments(parser):
    parser.add_argument("ipa_path", type=Path, help="Path of the IPA to produce")
    parser.add_argument(
        "--archive", type=Path, required=True, help="Path to the .xcarchive"
    )
    parser.add_argument(
        "--export-options",
        type=Path,
        required=True,
        help="Path to the export options plist",
    )
    add_profile_argument(parser)
    parser.add_argument("--workspace", type=Path, help="Xcode workspace (fastlane)")
    parser.add_argument(
        "--identity", type=str, help="Code signing identity (fastlane)"
    )
    parser.add_argument("--scheme", type=str, help="Scheme [default: from config]")
    parser.add_argument("--keychain", type=str, help="Keychain [default: from config]")
    parser.add_argument("--team-id", type=str, help="Team [default: from config]")
    parser.add_argument(
        "--client",
        action="store_true",
        help="Export with xcodebuild instead of fastlane gym [default: disabled]",
    )


def add_resign_arguments(parser):
    parser.add_argument("source_ipa", type=Path, help="IPA to resign")
    parser.add_argument("dest_ipa", type=Path, help="Where to write the resigned IPA")
    parser.add_argument(
        "--entitlements", type=Path, required=True, help="Entitlements plist"
    )
    add_profile_argument(parser)
    parser.add_argument(
        "--identity", type=str, required=True, help="Code signing identity"
    )
    parser.add_argument("--keychain", type=str, help="Keychain [default: from config]")
    parser.add_argument("--team-id", type=str, help="Team [default: from config]")
