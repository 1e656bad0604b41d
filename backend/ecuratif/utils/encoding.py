"""Charset detection and transcoding for uploaded spreadsheet exports.

Exports come out of office suites in whatever legacy code page the
workstation uses. Everything downstream compares strings (source names,
status labels), so content is brought to a single canonical encoding first.
"""

from __future__ import annotations

import codecs
import logging
from collections.abc import Sequence
from typing import Protocol

from charset_normalizer import from_bytes

from ecuratif.services.import_errors import EncodingError

logger = logging.getLogger(__name__)

# Code pages French office suites actually export in
DEFAULT_CANDIDATES = ("utf_8", "cp1252", "latin_1")


class Codec(Protocol):
    """Detection and conversion capability injected into the import pipeline."""

    def detect(self, payload: bytes) -> str:
        """Return the encoding label of ``payload`` or raise EncodingError."""
        ...

    def convert(self, payload: bytes, source: str, target: str) -> bytes:
        """Re-encode ``payload`` from ``source`` to ``target`` or raise EncodingError."""
        ...


class CharsetNormalizerCodec:
    """Codec backed by charset-normalizer and the Python codec registry.

    Detection only considers ``candidates``. Left unrestricted,
    charset-normalizer tends to read short French cp1252 exports as cp1250,
    which turns "è" into "č".
    """

    def __init__(self, candidates: Sequence[str] = DEFAULT_CANDIDATES) -> None:
        self.candidates = [canonical_name(label) for label in candidates]

    def detect(self, payload: bytes) -> str:
        best = from_bytes(payload, cp_isolation=self.candidates).best()
        if best is None:
            raise EncodingError("Unable to detect the file encoding")
        detected = canonical_name(best.encoding)
        # latin-1 only differs from cp1252 on C1 control codes, which never
        # appear in a spreadsheet export but hold cp1252 quotes and ligatures.
        if detected == "iso8859-1" and "cp1252" in self.candidates:
            try:
                payload.decode("cp1252")
            except UnicodeDecodeError:
                return detected
            return "cp1252"
        return detected

    def convert(self, payload: bytes, source: str, target: str) -> bytes:
        try:
            return payload.decode(source).encode(target)
        except LookupError as exc:
            raise EncodingError(f"Unsupported encoding: {exc}") from exc
        except (UnicodeDecodeError, UnicodeEncodeError) as exc:
            raise EncodingError(
                f"Cannot transcode from {source} to {target}: {exc}"
            ) from exc


def canonical_name(label: str) -> str:
    """Normalize an encoding label (``UTF8``, ``utf_8``...) to Python's name."""
    try:
        return codecs.lookup(label).name
    except LookupError as exc:
        raise EncodingError(f"Unsupported encoding: {label!r}") from exc


def normalize_encoding(payload: bytes, codec: Codec, canonical: str = "utf-8") -> bytes:
    """Return ``payload`` re-encoded in ``canonical``.

    Content already in the canonical encoding (or plain ASCII, which is a
    subset of it) is returned untouched.
    """
    detected = canonical_name(codec.detect(payload))
    target = canonical_name(canonical)
    if detected in (target, "ascii"):
        logger.info(f"Upload already {detected}, no transcoding needed")
        return payload

    logger.info(f"Transcoding upload from {detected} to {target}")
    return codec.convert(payload, detected, target)
