from pathlib import Path
from xml.sax.saxutils import escape

from ipasmith.logger import get_console
from ipasmith.src.ipa.provisioning_profile_analyser import ExportMethod

EXPORT_OPTIONS_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" "http://www.apple.com/DTDs/PropertyList-1.0.dtd">
<plist version="1.0">
  <dict>
    <key>method</key>
    <string>{export_method}</string>
    <key>teamID</key>
    <string>{team_id}</string>
    <key>provisioningProfiles</key>
    <dict>
      <key>{bundle_identifier}</key>
      <string>{provisioning_profile_uuid}</string>
    </dict>
  </dict>
</plist>"""


def create_export_options_plist(
    bundle_identifier: str,
    provisioning_profile_uuid: str,
    export_method: str,
    team_id: str,
) -> str:
    method = ExportMethod(export_method)
    return EXPORT_OPTIONS_TEMPLATE.format(
        export_method=method.value,
        team_id=escape(team_id),
        bundle_identifier=escape(bundle_identifier),
        provisioning_profile_uuid=escape(provisioning_profile_uuid),
    )


def write_export_options_plist(
    plist_path: Path,
    bundle_identifier: str,
    provisioning_profile_uuid: str,
    export_method: str,
    team_id: str,
) -> None:
    """Write the -exportOptionsPlist file consumed by xcodebuild and gym"""
    contents = create_export_options_plist(
        bundle_identifier, provisioning_profile_uuid, export_method, team_id
    )
    Path(plist_path).write_text(contents, encoding="utf-8")
    get_console().log(f"[green]Wrote export options:[/] {plist_path}")
