"""Top-level orchestrator for CSV imports.

Coordinates file gate -> encoding -> parsing -> source lookup -> row mapping
-> inserts and returns an ImportReport. All state lives in this call; nothing
is shared between concurrent imports.
"""

from __future__ import annotations

import logging

from ecuratif.core.config import Settings, get_settings
from ecuratif.services.batch_insert import ProgressCallback, insert_all
from ecuratif.services.csv_ingest import CandidateRecord, map_row, parse_records
from ecuratif.services.import_errors import PipelineAbort, RowError
from ecuratif.services.import_report import ImportReport, ReportBuilder
from ecuratif.services.import_schema import CURRENT_SCHEMA, SchemaDescriptor
from ecuratif.services.source_resolver import resolve_source
from ecuratif.storage.import_storage import ImportStorage
from ecuratif.storage.upload_store import UploadedArtifact
from ecuratif.utils.csv_validator import verify_file_type
from ecuratif.utils.encoding import CharsetNormalizerCodec, Codec, normalize_encoding

logger = logging.getLogger(__name__)


def run_import(
    artifact: UploadedArtifact,
    storage: ImportStorage,
    *,
    codec: Codec | None = None,
    settings: Settings | None = None,
    schema: SchemaDescriptor = CURRENT_SCHEMA,
    on_progress: ProgressCallback | None = None,
) -> ImportReport:
    """Import one maintenance export.

    Raises a PipelineAbort subclass (FileFormatError, EncodingError,
    ParseError, EntityNotFoundError) when the file cannot be imported at all;
    nothing is written in that case. Row-level problems end up in the
    returned report.
    """
    settings = settings or get_settings()
    codec = codec or CharsetNormalizerCodec(settings.import_candidate_encodings)

    try:
        verify_file_type(artifact.filename, settings.import_allowed_extension)
        payload = normalize_encoding(
            artifact.read_bytes(), codec, settings.import_canonical_encoding
        )
        parsed = parse_records(payload, delimiter=settings.import_csv_delimiter)
        source_id = resolve_source(storage, parsed.entity_name)
    except PipelineAbort as exc:
        logger.error(f"Import of {artifact.filename!r} aborted ({exc.kind}): {exc}")
        raise

    report = ReportBuilder(source_id, settings.import_transaction_policy)
    candidates: list[CandidateRecord] = []
    for row in parsed.rows:
        try:
            candidates.append(map_row(row, source_id, schema))
        except RowError as exc:
            logger.warning(f"Skipping {exc}")
            report.add_failure(exc)

    insert_all(
        storage,
        source_id,
        candidates,
        report,
        policy=settings.import_transaction_policy,
        on_progress=on_progress,
    )

    result = report.build()
    logger.info(
        f"Import of {artifact.filename!r} into source {source_id}: {result.summary()}"
    )
    return result
