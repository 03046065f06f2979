"""
Face Detection to Tabular
Use case: Turn a canned Cloud Vision face response into typed rows without calling the API.
- Derives the output schema from the input schema and the selected feature
- Maps likelihoods to names and keeps landmark order
- Collects rows into a pandas DataFrame
"""

import json
import logging

from visiontab.core import CollectingEmitter, ExtractorConfigBuilder, Field, ImageFeature, Schema, SchemaType
from visiontab.core.annotations import AnnotateImageResponse

logging.basicConfig(level=logging.INFO)

response_json = r'''
{
  "faceAnnotations": [
    {
      "boundingPoly": {"vertices": [{"x": 10, "y": 20}, {"x": 110, "y": 20}, {"x": 110, "y": 140}, {"x": 10, "y": 140}]},
      "landmarks": [{"type": "LEFT_EYE", "position": {"x": 40.5, "y": 60.2, "z": -1.5}}],
      "rollAngle": 1.5, "panAngle": -12.2, "tiltAngle": 4.0,
      "detectionConfidence": 0.98, "landmarkingConfidence": 0.75,
      "joyLikelihood": "VERY_LIKELY", "headwearLikelihood": "LIKELY"
    }
  ]
}
'''


class CannedAnnotator:
    def annotate_image(self, image, features, image_context=None):
        return AnnotateImageResponse.model_validate(json.loads(response_json))


if __name__ == "__main__":
    input_schema = Schema.record_of("photo", [
        Field.of("photo_id", Schema.of(SchemaType.STRING)),
        Field.of("uri", Schema.of(SchemaType.STRING)),
    ])

    stage = (ExtractorConfigBuilder(ImageFeature.FACE)
             .from_path("uri")
             .output("faces")
             .logger(logging.getLogger("faces"))
             .to_transform())
    output_schema = stage.configure(input_schema)
    stage.initialize(CannedAnnotator())

    emitter = CollectingEmitter()
    for photo in [{"photo_id": "p-1", "uri": "gs://photos/p-1.jpg"}, {"photo_id": "p-2", "uri": ""}]:
        stage.transform(photo, emitter)

    print(json.dumps(output_schema.to_dict(), indent=2)[:400], "...")
    print(emitter.to_dataframe(output_schema))
    for entry in emitter.errors:
        print("error:", entry.error_msg)
