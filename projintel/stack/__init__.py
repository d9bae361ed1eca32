"""Tech-stack detection from manifests, CDN references and an extension census."""

from .base import DetectionContext, Detector
from .categories import DatabaseDetector, StylingDetector, TestingDetector
from .detector import StackDetector, confidence_bucket, detect_stack
from .framework import FrameworkDetector
from .language import LanguageDetector

__all__ = [
    "DatabaseDetector",
    "DetectionContext",
    "Detector",
    "FrameworkDetector",
    "LanguageDetector",
    "StackDetector",
    "StylingDetector",
    "TestingDetector",
    "confidence_bucket",
    "detect_stack",
]
