"""Body gesture recognition module."""
from .gesture_classifier import GestureClassifier, GestureRule, GESTURE_RULES

__all__ = ["GestureClassifier", "GestureRule", "GESTURE_RULES"]
