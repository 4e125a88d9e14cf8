from datetime import datetime
from pathlib import Path
from typing import Dict, List, Union
from xml.parsers.expat import ExpatError
import plistlib

from ipasmith.src.core.errors import PlistParseError

# Every value a property list can hold
PlistValue = Union[
    str, int, float, bool, bytes, datetime, List["PlistValue"], Dict[str, "PlistValue"]
]
PlistDict = Dict[str, PlistValue]


def plist_loads(data: Union[str, bytes], source: str | Path | None = None) -> PlistDict:
    """Parse XML or binary plist data whose root must be a dictionary"""
    if isinstance(data, str):
        data = data.encode("utf-8")

    try:
        parsed = plistlib.loads(data)
    except (
        plistlib.InvalidFileException,
        ExpatError,
        ValueError,
        AttributeError,
        IndexError,
        KeyError,
        TypeError,
    ) as e:
        raise PlistParseError(str(e) or type(e).__name__, source) from e

    if not isinstance(parsed, dict):
        raise PlistParseError(
            f"expected a dictionary at the root, got {type(parsed).__name__}", source
        )
    return parsed


def plist_load(path: Path) -> PlistDict:
    return plist_loads(Path(path).read_bytes(), source=path)


def plist_dumps(value: PlistDict) -> bytes:
    """Serialize to XML plist, keys in insertion order"""
    return plistlib.dumps(value, fmt=plistlib.FMT_XML, sort_keys=False)
