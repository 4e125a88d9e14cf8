from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

from asn1crypto.cms import ContentInfo

from ipasmith.src.core.errors import PlistParseError
from ipasmith.src.utils.plist_helper import PlistDict, plist_loads


class ExportMethod(str, Enum):
    AD_HOC = "ad-hoc"
    ENTERPRISE = "enterprise"
    APP_STORE = "app-store"


def dump_prov(prov_file: Path) -> PlistDict:
    """Read a provisioning profile without using macOS security command"""
    with open(prov_file, "rb") as f:
        raw = f.read()

    try:
        content_info = ContentInfo.load(raw)
        signed_data = content_info["content"]
        # The plist is the encapsulated content of the signed data
        plist_data = signed_data["encap_content_info"]["content"].native
    except (ValueError, TypeError, KeyError) as e:
        raise PlistParseError(f"not a signed provisioning profile: {e}", prov_file)

    if plist_data is None:
        raise PlistParseError("provisioning profile has no content", prov_file)
    return plist_loads(plist_data, source=prov_file)


def resolve_export_method(profile: Mapping) -> ExportMethod:
    """Distribution channel implied by a provisioning profile"""
    if profile.get("ProvisionedDevices"):
        return ExportMethod.AD_HOC
    elif profile.get("ProvisionsAllDevices") is True:
        return ExportMethod.ENTERPRISE
    else:
        return ExportMethod.APP_STORE


def get_profile_uuid(profile: Mapping) -> str:
    uuid = profile.get("UUID")
    if not uuid:
        raise ValueError("Provisioning profile has no UUID")
    return uuid


def get_profile_team_id(profile: Mapping) -> Optional[str]:
    team_ids = profile.get("TeamIdentifier") or []
    return team_ids[0] if team_ids else None
