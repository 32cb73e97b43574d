# Core transformation pipeline. Subpackages are imported directly, e.g.
# `from taroshift.core.pipeline import TransformOrchestrator`.
