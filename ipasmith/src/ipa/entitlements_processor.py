from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Mapping, Optional
import copy
import glob
import os

from ipasmith.logger import get_console
from ipasmith.src.core.errors import (
    ArchiveEntitlementsAmbiguous,
    ArchiveEntitlementsNotFound,
    InvalidEntitlementsInput,
)
from ipasmith.src.core.tool_runner import SubprocessToolRunner, ToolRunner
from ipasmith.src.utils.match import Ambiguous, NotFound, expect_exactly_one
from ipasmith.src.utils.plist_helper import PlistDict, plist_dumps, plist_load

# Keys whose value comes from the archive's entitlements when it has them
ENTITLEMENT_TRANSFER_RULES: FrozenSet[str] = frozenset(
    {
        "com.apple.developer.associated-domains",
        "com.apple.developer.healthkit",
        "com.apple.developer.homekit",
        "com.apple.developer.icloud-container-identifiers",
        "com.apple.developer.icloud-services",
        "com.apple.developer.in-app-payments",
        "com.apple.developer.networking.vpn.api",
        "com.apple.developer.ubiquity-container-identifiers",
        "com.apple.developer.ubiquity-kvstore-identifier",
        "com.apple.external-accessory.wireless-configuration",
        "com.apple.security.application-groups",
        "inter-app-audio",
        "keychain-access-groups",
    }
)

# Keys that never make it into the signed binary
BLACKLISTED_ENTITLEMENT_KEYS: FrozenSet[str] = frozenset(
    {
        "com.apple.developer.icloud-container-development-container-identifiers",
        "com.apple.developer.icloud-container-environment",
        "com.apple.developer.icloud-container-identifiers",
        "com.apple.developer.icloud-services",
        "com.apple.developer.restricted-resource-mode",
        "com.apple.developer.ubiquity-container-identifiers",
        "com.apple.developer.ubiquity-kvstore-identifier",
        "inter-app-audio",
        "com.apple.developer.homekit",
        "com.apple.developer.healthkit",
        "com.apple.developer.in-app-payments",
        "com.apple.developer.maps",
        "com.apple.external-accessory.wireless-configuration",
    }
)

ARCHIVE_ENTITLEMENTS_SUBPATH = "Products/Applications/{app_name}.app/*.entitlements"
ENTITLEMENTS_FILE_MODE = 0o755


def merge_entitlements(
    profile_entitlements: Mapping,
    archive_entitlements: Mapping,
    transfer_rules: Iterable[str] = ENTITLEMENT_TRANSFER_RULES,
    blacklist: Iterable[str] = BLACKLISTED_ENTITLEMENT_KEYS,
) -> PlistDict:
    """Combine profile and archive entitlements into the set to sign with.

    Profile entitlements are the base. Transfer rule keys present in the
    archive overwrite (or add to) them, then blacklisted keys are dropped.
    Blacklist wins over transfer. Inputs are left untouched.
    """
    if not isinstance(profile_entitlements, Mapping):
        raise InvalidEntitlementsInput("Profile", profile_entitlements)
    if not isinstance(archive_entitlements, Mapping):
        raise InvalidEntitlementsInput("Archive", archive_entitlements)

    entitlements = copy.deepcopy(dict(profile_entitlements))

    for rule in transfer_rules:
        if rule in archive_entitlements:
            entitlements[rule] = copy.deepcopy(archive_entitlements[rule])

    blacklist = frozenset(blacklist)
    return {key: value for key, value in entitlements.items() if key not in blacklist}


def build_rule_sets(
    extra_transfer_rules: Iterable[str] = (), extra_blacklist: Iterable[str] = ()
) -> Dict[str, FrozenSet[str]]:
    """Default rule sets extended with configured keys"""
    return {
        "transfer_rules": ENTITLEMENT_TRANSFER_RULES | frozenset(extra_transfer_rules),
        "blacklist": BLACKLISTED_ENTITLEMENT_KEYS | frozenset(extra_blacklist),
    }


def find_archive_entitlements(archive_path: Path, app_name: str = "ExpoKitApp") -> Path:
    """Locate the single entitlements file xcodebuild left in the archive"""
    # Only the fixed subpath is a pattern
    pattern = Path(glob.escape(str(archive_path))) / ARCHIVE_ENTITLEMENTS_SUBPATH.format(
        app_name=glob.escape(app_name)
    )
    match = expect_exactly_one(pattern)

    if isinstance(match, NotFound):
        raise ArchiveEntitlementsNotFound(match.pattern)
    if isinstance(match, Ambiguous):
        raise ArchiveEntitlementsAmbiguous(match.pattern, match.paths)
    return match.path


def _write_entitlements(path: Path, data: bytes) -> None:
    path.write_bytes(data)
    os.chmod(path, ENTITLEMENTS_FILE_MODE)


def create_entitlements_file(
    generated_entitlements_path: Path,
    profile_data: Mapping,
    archive_path: Path,
    runner: Optional[ToolRunner] = None,
    app_name: str = "ExpoKitApp",
    transfer_rules: Iterable[str] = ENTITLEMENT_TRANSFER_RULES,
    blacklist: Iterable[str] = BLACKLISTED_ENTITLEMENT_KEYS,
) -> PlistDict:
    """Write the merged entitlements plist used to resign the IPA.

    Returns the merged dictionary that was written.
    """
    console = get_console()
    runner = runner or SubprocessToolRunner()
    generated_entitlements_path = Path(generated_entitlements_path)

    profile_entitlements = profile_data.get("Entitlements", {})

    archive_entitlements_path = find_archive_entitlements(archive_path, app_name)
    console.log(f"[blue]Archive entitlements:[/] {archive_entitlements_path}")
    archive_entitlements = plist_load(archive_entitlements_path)

    entitlements = merge_entitlements(
        profile_entitlements, archive_entitlements, transfer_rules, blacklist
    )
    removed = sorted(set(profile_entitlements) - set(entitlements))
    if removed:
        console.log(f"[yellow]Removed entitlements:[/] {', '.join(removed)}")

    _write_entitlements(generated_entitlements_path, plist_dumps(entitlements))

    # PlistBuddy output is what codesign expects byte for byte
    result = runner.run(
        "/usr/libexec/PlistBuddy",
        ["-x", "-c", "Print", str(generated_entitlements_path)],
        quiet=True,
    )
    _write_entitlements(generated_entitlements_path, result.stdout.encode("utf-8"))

    console.log(f"[green]Wrote entitlements:[/] {generated_entitlements_path}")
    return entitlements
