import datetime
import plistlib
from dataclasses import dataclass
from typing import Dict, List, Optional

import pytest
from asn1crypto import cms
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import (
    BestAvailableEncryption,
    Encoding,
    NoEncryption,
    pkcs12,
)
from cryptography.x509.oid import NameOID

from ipasmith.src.core.tool_runner import ToolResult, ToolRunner

CERT_PASSWORD = "hunter2"


@dataclass
class ToolCall:
    name: str
    args: List[str]
    env: Optional[Dict[str, str]]


class FakeToolRunner(ToolRunner):
    """Records invocations and answers with canned results keyed by tool name"""

    def __init__(self, responses: Optional[Dict[str, ToolResult]] = None):
        super().__init__()
        self.responses = responses or {}
        self.calls: List[ToolCall] = []

    def execute(self, name, args, env):
        self.calls.append(ToolCall(name, list(args), dict(env) if env else None))
        return self.responses.get(name, ToolResult(stdout="", exit_code=0))


def _make_certificate(key, common_name: str) -> x509.Certificate:
    name = x509.Name(
        [
            x509.NameAttribute(NameOID.COMMON_NAME, common_name),
            x509.NameAttribute(NameOID.ORGANIZATIONAL_UNIT_NAME, "ABCDE12345"),
        ]
    )
    now = datetime.datetime.now(datetime.timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=30))
        .sign(key, hashes.SHA256())
    )


@pytest.fixture(scope="session")
def signing_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def certificate(signing_key):
    return _make_certificate(signing_key, "iPhone Distribution: Test Team (ABCDE12345)")


@pytest.fixture(scope="session")
def expected_fingerprint(certificate):
    import hashlib

    return hashlib.sha1(certificate.public_bytes(Encoding.DER)).hexdigest().upper()


@pytest.fixture(scope="session")
def p12_bytes(signing_key, certificate):
    return pkcs12.serialize_key_and_certificates(
        b"ipasmith",
        signing_key,
        certificate,
        None,
        BestAvailableEncryption(CERT_PASSWORD.encode()),
    )


@pytest.fixture(scope="session")
def unencrypted_p12_bytes(signing_key, certificate):
    return pkcs12.serialize_key_and_certificates(
        b"ipasmith", signing_key, certificate, None, NoEncryption()
    )


@pytest.fixture(scope="session")
def key_only_p12_bytes(signing_key):
    return pkcs12.serialize_key_and_certificates(
        b"ipasmith", signing_key, None, None, NoEncryption()
    )


@pytest.fixture(scope="session")
def cas_only_p12_bytes(certificate):
    return pkcs12.serialize_key_and_certificates(
        None, None, None, [certificate], NoEncryption()
    )


@pytest.fixture(scope="session")
def ca_certificate():
    ca_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return _make_certificate(ca_key, "Apple Worldwide Developer Relations Test CA")


@pytest.fixture(scope="session")
def p12_with_ca_bytes(signing_key, certificate, ca_certificate):
    return pkcs12.serialize_key_and_certificates(
        b"ipasmith",
        signing_key,
        certificate,
        [ca_certificate],
        BestAvailableEncryption(CERT_PASSWORD.encode()),
    )


@pytest.fixture
def fake_runner():
    return FakeToolRunner()


def make_mobileprovision(profile: dict) -> bytes:
    """Wrap a profile dictionary in an unsigned CMS envelope"""
    signed_data = cms.SignedData(
        {
            "version": "v1",
            "digest_algorithms": [],
            "encap_content_info": {
                "content_type": "data",
                "content": plistlib.dumps(profile),
            },
            "signer_infos": [],
        }
    )
    return cms.ContentInfo(
        {"content_type": "signed_data", "content": signed_data}
    ).dump()


@pytest.fixture
def profile_data():
    return {
        "AppIDName": "Test App",
        "UUID": "0f5c2b1a-7d7e-4d38-9a57-4f2b1b0d6e11",
        "TeamIdentifier": ["ABCDE12345"],
        "ProvisionedDevices": ["00008030-001A2B3C4D5E6F70"],
        "Entitlements": {
            "application-identifier": "ABCDE12345.com.example.app",
            "com.apple.developer.team-identifier": "ABCDE12345",
            "keychain-access-groups": ["ABCDE12345.*"],
            "com.apple.developer.maps": True,
            "get-task-allow": False,
        },
    }


@pytest.fixture
def mobileprovision(tmp_path, profile_data):
    path = tmp_path / "app.mobileprovision"
    path.write_bytes(make_mobileprovision(profile_data))
    return path
