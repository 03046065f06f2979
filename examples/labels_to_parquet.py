"""
Labels to Parquet
Use case: Label every image listed in a JSONL file with the Cloud Vision API and write typed Parquet.
- Requires an OAuth access token in VISION_TOKEN
- Failed images end up in errors.jsonl, one per line
"""

import os
import sys

from visiontab.core import ExtractorConfig, ExtractorTransform
from visiontab.core.io import stream_jsonl_to_parquet
from visiontab.rest.client import VisionClient


def main(in_path: str, out_path: str) -> None:
    stage = ExtractorTransform(ExtractorConfig(feature="Labels", path_field="uri", output_field="labels"))
    stage.configure()

    headers = {"Authorization": f"Bearer {os.environ['VISION_TOKEN']}"}
    with VisionClient(headers=headers) as client:
        stage.initialize(client)
        emitted, failed = stream_jsonl_to_parquet(stage, in_path, out_path, errors_path="errors.jsonl")

    print(f"{emitted} rows written to {out_path}, {failed} errors")


if __name__ == "__main__":
    main(sys.argv[1], sys.argv[2])
