"""Address codec used by the ``check`` command.

Full checksum decoding belongs to the wallet layer; this codec accepts the
legacy base58 address shape and rejects everything else.
"""

import re
from dataclasses import dataclass

# base58 alphabet (no 0, O, I, l)
_BASE58_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{26,35}$")


@dataclass(frozen=True)
class AddressValidation:
    ok: bool
    reason: str
    address: str


class LegacyAddressCodec:
    def __init__(self, prefixes: str = "S") -> None:
        self.prefixes: str = prefixes

    def decode(self, raw: str) -> AddressValidation:
        a: str = (raw or "").strip()
        if not a:
            return AddressValidation(False, "missing_address", "")
        if not _BASE58_RE.match(a):
            return AddressValidation(False, "invalid_address_format", a)
        if a[0] not in self.prefixes:
            return AddressValidation(False, "invalid_address_prefix", a)
        return AddressValidation(True, "ok", a)
