from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from ipasmith.logger import get_console
from ipasmith.src.core.tool_runner import SubprocessToolRunner, ToolRunner, ToolResult
from ipasmith.src.ipa.provisioning_profile_analyser import ExportMethod


@dataclass
class FastlaneCredentials:
    """Apple account details fastlane needs to talk to the portal"""

    team_id: str
    password: Optional[str] = None


@dataclass
class BuildOptions:
    """Configuration for exporting an .xcarchive to an IPA"""

    ipa_path: Path
    archive_path: Path
    export_options_plist_path: Path
    keychain_path: str
    export_method: ExportMethod = ExportMethod.APP_STORE
    workspace: Optional[Path] = None  # Only used by the fastlane path
    code_sign_identity: Optional[str] = None  # Only used by the fastlane path
    scheme: str = "ExpoKitApp"


@dataclass
class ResignOptions:
    """Configuration for resigning an existing IPA"""

    source_ipa_path: Path
    dest_ipa_path: Path
    entitlements_path: Path
    provisioning_profile_path: Path
    code_sign_identity: str
    keychain_path: str


def _keychain_flags(keychain_path: str) -> str:
    return f'OTHER_CODE_SIGN_FLAGS="--keychain {keychain_path}"'


def fastlane_env(credentials: FastlaneCredentials) -> Dict[str, str]:
    env = {
        "FASTLANE_SKIP_UPDATE_CHECK": "1",
        "FASTLANE_DISABLE_COLORS": "1",
        "FASTLANE_TEAM_ID": credentials.team_id,
        "CI": "1",
        "LC_ALL": "en_US.UTF-8",
    }
    if credentials.password is not None:
        env["FASTLANE_PASSWORD"] = credentials.password
    return env


def run_fastlane(
    credentials: FastlaneCredentials, fastlane_args: List[str], runner: ToolRunner
) -> ToolResult:
    return runner.run("fastlane", fastlane_args, env=fastlane_env(credentials), quiet=True)


def build_ipa(
    options: BuildOptions,
    credentials: FastlaneCredentials,
    runner: Optional[ToolRunner] = None,
    client: bool = False,
) -> None:
    """Export the archive to an IPA.

    The client path calls xcodebuild directly, everything else goes through
    fastlane gym.
    """
    console = get_console()
    runner = runner or SubprocessToolRunner()
    ipa_path = Path(options.ipa_path)
    output_dir = str(ipa_path.parent)
    method = ExportMethod(options.export_method)

    console.log(f"[yellow]Exporting {options.archive_path} as {method.value} IPA...")

    if client:
        runner.run(
            "xcodebuild",
            [
                "-exportArchive",
                "-archivePath",
                str(options.archive_path),
                "-exportOptionsPlist",
                str(options.export_options_plist_path),
                "-exportPath",
                output_dir,
                _keychain_flags(options.keychain_path),
            ],
            env={"CI": "1"},
        )
    else:
        if options.workspace is None or options.code_sign_identity is None:
            raise ValueError(
                "Workspace and code sign identity are required to export with fastlane"
            )
        run_fastlane(
            credentials,
            [
                "gym",
                "-n",
                ipa_path.name,
                "--workspace",
                str(options.workspace),
                "--scheme",
                options.scheme,
                "--archive_path",
                str(options.archive_path),
                "--skip_build_archive",
                "true",
                "-i",
                options.code_sign_identity,
                "--export_options",
                str(options.export_options_plist_path),
                "--export_method",
                method.value,
                "--export_xcargs",
                _keychain_flags(options.keychain_path),
                "-o",
                output_dir,
                "--verbose",
            ],
            runner,
        )

    console.log(f"[green]Exported IPA to:[/] {output_dir}")


def resign_ipa(
    options: ResignOptions,
    credentials: FastlaneCredentials,
    runner: Optional[ToolRunner] = None,
) -> None:
    """Copy the IPA and resign the copy with fastlane sigh"""
    console = get_console()
    runner = runner or SubprocessToolRunner()

    runner.run("cp", ["-rf", str(options.source_ipa_path), str(options.dest_ipa_path)])
    run_fastlane(
        credentials,
        [
            "sigh",
            "resign",
            "--verbose",
            "--entitlements",
            str(options.entitlements_path),
            "--signing_identity",
            options.code_sign_identity,
            "--keychain_path",
            options.keychain_path,
            "--provisioning_profile",
            str(options.provisioning_profile_path),
            str(options.dest_ipa_path),
        ],
        runner,
    )
    console.log(f"[green]Resigned IPA:[/] {options.dest_ipa_path}")
