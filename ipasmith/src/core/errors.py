from pathlib import Path
from typing import List, Optional, Sequence


class SigningError(Exception):
    """Base class for every error raised while signing or packaging"""


class UnsupportedInputType(SigningError):
    def __init__(self, value):
        self.value_type = type(value).__name__
        super().__init__(
            f"Certificate container must be a base64 string or bytes, got {self.value_type}"
        )


class InvalidContainerFormat(SigningError):
    """Malformed PKCS#12 data or wrong password"""


class MissingCertificateBag(SigningError):
    def __init__(self):
        super().__init__("Couldn't find a certificate bag in the PKCS#12 container")


class CertificateNotTrusted(SigningError):
    def __init__(self, fingerprint: str, identities: str):
        self.fingerprint = fingerprint
        self.identities = identities
        super().__init__(
            f"Codesign identity not present in find-identity: {fingerprint}\n{identities}"
        )


class InvalidEntitlementsInput(SigningError):
    def __init__(self, name: str, value):
        self.name = name
        super().__init__(
            f"{name} entitlements must be a mapping, got {type(value).__name__}"
        )


class ArchiveEntitlementsNotFound(SigningError):
    def __init__(self, pattern: str):
        self.pattern = pattern
        super().__init__(
            f"Didn't find any generated entitlements file in archive: {pattern}"
        )


class ArchiveEntitlementsAmbiguous(SigningError):
    def __init__(self, pattern: str, paths: Sequence[Path]):
        self.pattern = pattern
        self.paths: List[Path] = list(paths)
        listing = "\n".join(f"  {p}" for p in self.paths)
        super().__init__(
            f"Found more than one entitlements file for {pattern}:\n{listing}"
        )


class PlistParseError(SigningError):
    def __init__(self, message: str, source: Optional[str | Path] = None):
        self.source = source
        where = f" ({source})" if source else ""
        super().__init__(f"Error when parsing plist{where}: {message}")


class ToolExecutionError(SigningError):
    """An external tool exited with a non-zero status"""

    def __init__(self, command: Sequence[str], exit_code: int, stdout: str, stderr: str):
        self.command = list(command)
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(
            f"{' '.join(self.command)} failed with exit code {exit_code}:\n"
            f"Stdout: {stdout}\nStderr: {stderr}"
        )
