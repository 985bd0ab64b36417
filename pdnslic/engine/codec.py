"""
License key wire format.

A key reads ``PDNS-<TYPE>-<BASE64_PAYLOAD>-<HEX_SIGNATURE>``. The type tag is
informational; the authoritative tier comes from the JSON payload. The
signature covers the base64 payload segment as ASCII text, not the decoded
JSON and not the whole key.
"""

from __future__ import annotations

import base64
import binascii
import json
import re

from pydantic import ValidationError as PydanticValidationError

from pdnslic.common.exceptions import LicenseFormatError
from pdnslic.common.models import LicenseKeyParts, LicensePayload, ReasonCode

KEY_FIELDS = 4
B64_ALPHABET_RE = re.compile(r"[A-Za-z0-9+/=]+")
B64_SEGMENT_RE = re.compile(r"[A-Za-z0-9+/]+={0,2}")
HEX_SIGNATURE_RE = re.compile(r"(?:[0-9a-fA-F]{2})+")
PAYLOAD_FIELD_ORDER = ("email", "type", "domains", "issued", "installation_id")


class LicenseCodec:
    """Parses and serializes license keys."""

    def __init__(self, product_tag: str = "PDNS", delimiter: str = "-") -> None:
        self.product_tag = product_tag
        self.delimiter = delimiter

    def parse(self, raw: str) -> LicenseKeyParts:
        if not isinstance(raw, str):
            raise LicenseFormatError(ReasonCode.LX_FMT, "License key must be text")
        fields = raw.strip().split(self.delimiter)
        if len(fields) != KEY_FIELDS:
            raise LicenseFormatError(
                ReasonCode.LX_FMT, f"Expected {KEY_FIELDS} fields, got {len(fields)}"
            )
        if fields[0].upper() != self.product_tag.upper():
            raise LicenseFormatError(ReasonCode.LX_FMT, "Unknown product tag")
        product_tag, type_tag, payload_segment, signature_hex = fields
        return LicenseKeyParts(
            product_tag=product_tag,
            type_tag=type_tag,
            payload_segment=payload_segment,
            signature_hex=signature_hex,
        )

    @staticmethod
    def check_payload_alphabet(parts: LicenseKeyParts) -> None:
        """Reject segments containing characters outside standard base64."""
        if not B64_ALPHABET_RE.fullmatch(parts.payload_segment):
            raise LicenseFormatError(ReasonCode.LX_B64, "Payload is not base64")

    def decode_payload(self, parts: LicenseKeyParts) -> tuple[str, LicensePayload]:
        """Return the raw base64 segment and the typed payload it encodes."""
        self.check_payload_alphabet(parts)
        segment = parts.payload_segment
        if len(segment) % 4 or not B64_SEGMENT_RE.fullmatch(segment):
            raise LicenseFormatError(ReasonCode.LX_B64, "Payload padding is invalid")
        try:
            data = base64.b64decode(segment, validate=True)
        except (binascii.Error, ValueError) as err:
            raise LicenseFormatError(ReasonCode.LX_B64, str(err)) from err
        if base64.b64encode(data).decode("ascii") != segment:
            raise LicenseFormatError(ReasonCode.LX_B64, "Non-canonical base64 payload")

        try:
            document = json.loads(data)
        except (ValueError, RecursionError) as err:
            raise LicenseFormatError(ReasonCode.LX_JSON, "Payload is not JSON") from err
        if not isinstance(document, dict) or not document.keys() >= {"type", "domains"}:
            raise LicenseFormatError(
                ReasonCode.LX_JSON, "Payload must be an object with type and domains"
            )
        try:
            payload = LicensePayload.model_validate(document)
        except PydanticValidationError as err:
            raise LicenseFormatError(ReasonCode.LX_JSON, str(err)) from err
        return segment, payload

    @staticmethod
    def decode_signature(parts: LicenseKeyParts) -> bytes:
        if not HEX_SIGNATURE_RE.fullmatch(parts.signature_hex):
            raise LicenseFormatError(ReasonCode.LX_SIGHEX, "Signature is not hex")
        return bytes.fromhex(parts.signature_hex)

    @staticmethod
    def signed_bytes(parts: LicenseKeyParts) -> bytes:
        """The exact byte sequence the issuer signed."""
        return parts.payload_segment.encode("ascii")

    @staticmethod
    def encode_payload(payload: LicensePayload) -> str:
        """Compact JSON, issuer field order, base64 encoded."""
        values = payload.model_dump()
        document = {
            name: values[name]
            for name in PAYLOAD_FIELD_ORDER
            if values[name] is not None
        }
        data = json.dumps(document, separators=(",", ":")).encode("utf-8")
        return base64.b64encode(data).decode("ascii")

    def encode(self, type_tag: str, payload_segment: str, signature: bytes) -> str:
        return self.delimiter.join(
            (self.product_tag, type_tag.upper(), payload_segment, signature.hex())
        )
