from .marker import FEATURE_PACKAGES, DependencyFeature, DependencyMarkerSet, observe

__all__ = ["FEATURE_PACKAGES", "DependencyFeature", "DependencyMarkerSet", "observe"]
