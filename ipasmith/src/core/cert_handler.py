from pathlib import Path
from typing import Optional, Union
import base64
import binascii

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.serialization import pkcs12

from ipasmith.logger import get_console
from ipasmith.src.core.errors import (
    CertificateNotTrusted,
    InvalidContainerFormat,
    MissingCertificateBag,
    UnsupportedInputType,
)
from ipasmith.src.core.tool_runner import SubprocessToolRunner, ToolRunner


def _first_certificate(p12: pkcs12.PKCS12KeyAndCertificates) -> Optional[x509.Certificate]:
    """Return the certificate of the first cert bag, preferring the key-matched one"""
    if p12.cert is not None:
        return p12.cert.certificate
    if p12.additional_certs:
        return p12.additional_certs[0].certificate
    return None


def compute_fingerprint(
    container: Union[str, bytes, bytearray], password: Optional[str] = None
) -> str:
    """SHA-1 fingerprint of the certificate inside a PKCS#12 container.

    Args:
        container: raw PKCS#12 bytes or their base64 encoding
        password: container password, empty when absent

    Returns:
        40 character uppercase hex digest of the certificate's DER encoding
    """
    if isinstance(container, (bytes, bytearray)):
        container = base64.b64encode(bytes(container)).decode("ascii")
    elif not isinstance(container, str):
        raise UnsupportedInputType(container)

    password = str(password or "")

    try:
        p12_der = base64.b64decode(container)
    except (binascii.Error, ValueError) as e:
        raise InvalidContainerFormat(f"Certificate container is not valid base64: {e}")

    try:
        p12 = pkcs12.load_pkcs12(p12_der, password.encode("utf-8") or None)
    except (ValueError, TypeError) as e:
        raise InvalidContainerFormat(
            f"Could not decode PKCS#12 container (wrong password?): {e}"
        )

    cert = _first_certificate(p12)
    if cert is None:
        raise MissingCertificateBag()

    return cert.fingerprint(hashes.SHA1()).hex().upper()


def find_identities_by_team_id(team_id: str, runner: Optional[ToolRunner] = None) -> str:
    """Raw `security find-identity` listing for the identities of a team"""
    runner = runner or SubprocessToolRunner()
    result = runner.run(
        "security", ["find-identity", "-v", "-s", f"({team_id})"], quiet=True
    )
    return result.stdout


def validate_certificate(
    container: Union[str, bytes, bytearray],
    password: Optional[str],
    team_id: str,
    runner: Optional[ToolRunner] = None,
) -> str:
    """Return the container's fingerprint if the team's keychain trusts it"""
    console = get_console()

    fingerprint = compute_fingerprint(container, password)
    console.log(f"[blue]Certificate fingerprint:[/] {fingerprint}")

    console.log(f"[yellow]Looking up codesigning identities for team {team_id}...")
    identities = find_identities_by_team_id(team_id, runner)

    if fingerprint not in identities:
        console.log(f"[red]Fingerprint {fingerprint} not found in identities")
        raise CertificateNotTrusted(fingerprint, identities)

    console.log(f"[green]Certificate is a valid identity for team {team_id}")
    return fingerprint


def ensure_certificate_valid(
    cert_path: Union[str, Path],
    cert_password: Optional[str],
    team_id: str,
    runner: Optional[ToolRunner] = None,
) -> str:
    """Read a .p12 file from disk and validate it against the team's identities"""
    cert_path = Path(cert_path)
    if not cert_path.exists():
        raise FileNotFoundError(f"Certificate not found: {cert_path}")

    get_console().log(f"[green]Loaded certificate:[/] {cert_path}")
    return validate_certificate(cert_path.read_bytes(), cert_password, team_id, runner)
