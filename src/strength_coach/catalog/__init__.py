"""Exercise catalog."""

from .exercises import BUILT_IN_EXERCISES, ExerciseCatalog, ExerciseInfo

__all__ = ["BUILT_IN_EXERCISES", "ExerciseCatalog", "ExerciseInfo"]
