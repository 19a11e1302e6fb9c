from exercises.alternating_curl import AlternatingBicepCurlDetector
from exercises.base import Detector, DetectorState, FormCheck, quality_from_score
from exercises.bicep_curl import BicepCurlDetector
from exercises.pushup import PushupDetector
from exercises.squat import SquatDetector

__all__ = [
    "Detector",
    "DetectorState",
    "FormCheck",
    "quality_from_score",
    "PushupDetector",
    "BicepCurlDetector",
    "AlternatingBicepCurlDetector",
    "SquatDetector",
]
