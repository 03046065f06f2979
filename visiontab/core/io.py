from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional, Tuple
import json
import logging
from contextlib import nullcontext

import pyarrow as pa
import pyarrow.parquet as pq

from .backends.pandas import DataFrameBackend, PandasBackend
from .driver import CollectingEmitter, ExtractorTransform, InvalidEntry
from .schema import Schema

logger = logging.getLogger(__name__)


def records_to_dataframe(records: Iterable[Dict[str, Any]], schema: Optional[Schema] = None, *, backend: Optional[DataFrameBackend] = None):
    return (backend or PandasBackend()).to_dataframe(list(records), schema)


def records_to_table(records: Iterable[Dict[str, Any]], schema: Schema) -> pa.Table:
    return pa.Table.from_pylist(list(records), schema=schema.to_arrow_schema())


def write_parquet(records: Iterable[Dict[str, Any]], schema: Schema, out_path: str, *, compression: Optional[str] = "snappy") -> None:
    pq.write_table(records_to_table(records, schema), out_path, compression=compression)


def stream_jsonl_to_parquet(
    stage: ExtractorTransform,
    in_path: str,
    out_path: str,
    *,
    errors_path: Optional[str] = None,
    batch_size: int = 1_000,
    compression: Optional[str] = "snappy",
) -> Tuple[int, int]:
    """
    Run a configured and initialized stage over a JSONL file of input records.

    Output records go to a Parquet file typed by the stage's output schema;
    error entries go, one JSON object per line, to ``errors_path`` when given.
    Returns the number of emitted records and the number of errors.
    """
    if stage.output_schema is None:
        raise RuntimeError("Stage must be configured before streaming.")

    arrow_schema = stage.output_schema.to_arrow_schema()
    emitter = CollectingEmitter()
    emitted = failed = 0

    with pq.ParquetWriter(out_path, arrow_schema, compression=compression) as writer, \
            _open_errors(errors_path) as ferr, \
            open(in_path, "r", encoding="utf-8") as fin:
        for line in fin:
            line = line.strip()
            if not line:
                continue

            stage.transform(json.loads(line), emitter)
            if len(emitter.records) + len(emitter.errors) >= batch_size:
                emitted, failed = _flush(emitter, writer, arrow_schema, ferr, emitted, failed)

        emitted, failed = _flush(emitter, writer, arrow_schema, ferr, emitted, failed)

    logger.info("Wrote %d records to %s (%d errors).", emitted, out_path, failed)
    return emitted, failed


def _flush(emitter: CollectingEmitter, writer: pq.ParquetWriter, arrow_schema: pa.Schema, ferr, emitted: int, failed: int) -> Tuple[int, int]:
    if emitter.records:
        writer.write_table(pa.Table.from_pylist(emitter.records, schema=arrow_schema))

    if ferr is not None:
        for entry in emitter.errors:
            ferr.write(json.dumps(_entry_to_json(entry), ensure_ascii=False) + "\n")

    logger.debug("Flushing %d records and %d errors.", len(emitter.records), len(emitter.errors))
    emitted += len(emitter.records)
    failed += len(emitter.errors)
    emitter.clear()
    return emitted, failed


def _entry_to_json(entry: InvalidEntry) -> Dict[str, Any]:
    return {"code": entry.error_code, "message": entry.error_msg, "record": entry.invalid_record}


def _open_errors(path: Optional[str]):
    if path is None:
        return nullcontext()
    return open(path, "w", encoding="utf-8")


def read_jsonl(path: str) -> List[Dict[str, Any]]:
    with open(path, "r", encoding="utf-8") as fin:
        return [json.loads(line) for line in fin if line.strip()]
