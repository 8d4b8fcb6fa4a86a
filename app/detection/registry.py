"""Deployment detector sets. The list length is fixed per deployment; unconfigured members degrade."""

from typing import List

from app.detection.adapters import BaseDetector
from app.detection.heuristics import ImageHeuristicsDetector
from app.detection.text_heuristics import TextHeuristicsDetector
from app.integrations.hive import HiveDetector
from app.integrations.illuminarty import IlluminartyDetector
from app.integrations.sightengine import SightEngineDetector
from app.integrations.text_detectors import GPTZeroDetector, OriginalityDetector
from app.integrations.vision.council import VisionCouncilDetector


def build_image_detectors() -> List[BaseDetector]:
    return [
        VisionCouncilDetector(),
        HiveDetector(),
        SightEngineDetector(),
        IlluminartyDetector(),
        ImageHeuristicsDetector(),
    ]


def build_text_detectors() -> List[BaseDetector]:
    return [
        GPTZeroDetector(),
        OriginalityDetector(),
        TextHeuristicsDetector(),
    ]
