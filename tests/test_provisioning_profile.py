import plistlib

import pytest

from ipasmith.src.core.errors import PlistParseError
from ipasmith.src.ipa.export_options import (
    create_export_options_plist,
    write_export_options_plist,
)
from ipasmith.src.ipa.provisioning_profile_analyser import (
    ExportMethod,
    dump_prov,
    get_profile_team_id,
    get_profile_uuid,
    resolve_export_method,
)


class TestResolveExportMethod:
    def test_provisioned_devices_is_ad_hoc(self):
        assert resolve_export_method({"ProvisionedDevices": ["a"]}) == "ad-hoc"

    def test_provisions_all_devices_is_enterprise(self):
        assert resolve_export_method({"ProvisionsAllDevices": True}) == "enterprise"

    def test_default_is_app_store(self):
        assert resolve_export_method({}) == "app-store"

    def test_devices_take_priority(self):
        profile = {"ProvisionedDevices": ["a"], "ProvisionsAllDevices": True}
        assert resolve_export_method(profile) is ExportMethod.AD_HOC

    def test_empty_device_list_is_not_ad_hoc(self):
        assert resolve_export_method({"ProvisionedDevices": []}) == "app-store"

    @pytest.mark.parametrize("flag", [1, "true", "YES", False])
    def test_all_devices_flag_must_be_exactly_true(self, flag):
        assert resolve_export_method({"ProvisionsAllDevices": flag}) == "app-store"


class TestDumpProv:
    def test_reads_embedded_plist(self, mobileprovision, profile_data):
        assert dump_prov(mobileprovision) == profile_data

    def test_not_a_cms_envelope(self, tmp_path):
        path = tmp_path / "bad.mobileprovision"
        path.write_bytes(b"\x00\x01 not der")
        with pytest.raises(PlistParseError):
            dump_prov(path)

    def test_profile_helpers(self, profile_data):
        assert get_profile_uuid(profile_data) == profile_data["UUID"]
        assert get_profile_team_id(profile_data) == "ABCDE12345"
        assert get_profile_team_id({}) is None
        with pytest.raises(ValueError):
            get_profile_uuid({})


class TestExportOptions:
    def test_template_fields(self):
        contents = create_export_options_plist(
            "com.example.app", "UUID-1", ExportMethod.ENTERPRISE, "ABCDE12345"
        )
        assert plistlib.loads(contents.encode()) == {
            "method": "enterprise",
            "teamID": "ABCDE12345",
            "provisioningProfiles": {"com.example.app": "UUID-1"},
        }

    def test_method_accepts_plain_strings(self):
        contents = create_export_options_plist("b", "u", "ad-hoc", "t")
        assert plistlib.loads(contents.encode())["method"] == "ad-hoc"

    def test_rejects_unknown_method(self):
        with pytest.raises(ValueError):
            create_export_options_plist("b", "u", "development", "t")

    def test_values_are_escaped(self):
        contents = create_export_options_plist("com.example.<app>&", "u", "app-store", "t")
        parsed = plistlib.loads(contents.encode())
        assert parsed["provisioningProfiles"] == {"com.example.<app>&": "u"}

    def test_write(self, tmp_path):
        path = tmp_path / "ExportOptions.plist"
        write_export_options_plist(path, "com.example.app", "UUID-1", "app-store", "T1")
        assert plistlib.loads(path.read_bytes())["method"] == "app-store"
