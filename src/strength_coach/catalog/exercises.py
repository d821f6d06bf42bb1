"""Exercise catalog: built-in exercises plus user-defined ones."""

from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.sessions import ExerciseType, to_camel


class ExerciseInfo(BaseModel):
    """Catalog entry for an exercise."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str
    name: str
    type: ExerciseType = ExerciseType.STRENGTH
    muscle_groups: List[str] = Field(default_factory=list)
    equipment: Optional[str] = None


def _strength(id: str, name: str, muscles: List[str], equipment: str) -> ExerciseInfo:
    return ExerciseInfo(id=id, name=name, muscle_groups=muscles, equipment=equipment)


BUILT_IN_EXERCISES: List[ExerciseInfo] = [
    # Chest
    _strength("bench-press", "Barbell Bench Press", ["chest", "triceps", "shoulders"], "barbell"),
    _strength("incline-bench-press", "Incline Barbell Bench Press", ["chest", "shoulders", "triceps"], "barbell"),
    _strength("dumbbell-bench-press", "Dumbbell Bench Press", ["chest", "triceps", "shoulders"], "dumbbell"),
    _strength("incline-dumbbell-press", "Incline Dumbbell Press", ["chest", "shoulders", "triceps"], "dumbbell"),
    _strength("dumbbell-fly", "Dumbbell Fly", ["chest"], "dumbbell"),
    _strength("chest-dip", "Chest Dip", ["chest", "triceps"], "bodyweight"),
    # Back
    _strength("deadlift", "Conventional Deadlift", ["back", "hamstrings", "glutes"], "barbell"),
    _strength("romanian-deadlift", "Romanian Deadlift", ["hamstrings", "glutes", "back"], "barbell"),
    _strength("barbell-row", "Barbell Row", ["back", "biceps"], "barbell"),
    _strength("dumbbell-row", "Dumbbell Row", ["back", "biceps"], "dumbbell"),
    _strength("lat-pulldown", "Lat Pulldown", ["back", "biceps"], "cable"),
    _strength("pull-up", "Pull-Up", ["back", "biceps"], "bodyweight"),
    _strength("cable-row", "Seated Cable Row", ["back", "biceps"], "cable"),
    # Shoulders
    _strength("overhead-press", "Overhead Press", ["shoulders", "triceps"], "barbell"),
    _strength("seated-dumbbell-press", "Seated Dumbbell Press", ["shoulders", "triceps"], "dumbbell"),
    _strength("lateral-raise", "Lateral Raise", ["shoulders"], "dumbbell"),
    _strength("face-pull", "Face Pull", ["shoulders", "back"], "cable"),
    # Legs
    _strength("squat", "Barbell Back Squat", ["quads", "glutes", "hamstrings"], "barbell"),
    _strength("front-squat", "Front Squat", ["quads", "glutes"], "barbell"),
    _strength("leg-press", "Leg Press", ["quads", "glutes"], "machine"),
    _strength("leg-extension", "Leg Extension", ["quads"], "machine"),
    _strength("leg-curl", "Lying Leg Curl", ["hamstrings"], "machine"),
    _strength("bulgarian-split-squat", "Bulgarian Split Squat", ["quads", "glutes"], "dumbbell"),
    _strength("calf-raise", "Standing Calf Raise", ["calves"], "machine"),
    # Arms
    _strength("barbell-curl", "Barbell Curl", ["biceps"], "barbell"),
    _strength("hammer-curl", "Hammer Curl", ["biceps", "forearms"], "dumbbell"),
    _strength("tricep-pushdown", "Tricep Pushdown", ["triceps"], "cable"),
    _strength("skull-crusher", "Skull Crusher", ["triceps"], "barbell"),
    # Cardio
    ExerciseInfo(id="treadmill", name="Treadmill", type=ExerciseType.CARDIO, muscle_groups=["cardio"]),
    ExerciseInfo(id="rowing-machine", name="Rowing Machine", type=ExerciseType.CARDIO, muscle_groups=["cardio"]),
    ExerciseInfo(id="stationary-bike", name="Stationary Bike", type=ExerciseType.CARDIO, muscle_groups=["cardio"]),
]


class ExerciseCatalog:
    """
    Id lookup over built-in and custom exercises.

    Custom exercises take precedence when ids collide.
    """

    def __init__(
        self,
        custom_exercises: Optional[Iterable[ExerciseInfo]] = None,
        built_in: Optional[Iterable[ExerciseInfo]] = None,
    ):
        self._built_in: Dict[str, ExerciseInfo] = {
            e.id: e for e in (built_in if built_in is not None else BUILT_IN_EXERCISES)
        }
        self._custom: Dict[str, ExerciseInfo] = {e.id: e for e in (custom_exercises or [])}

    def lookup(self, exercise_id: str) -> Optional[ExerciseInfo]:
        if exercise_id in self._custom:
            return self._custom[exercise_id]
        return self._built_in.get(exercise_id)

    def name_for(self, exercise_id: str) -> str:
        """Display name for an id, or the id itself when unknown."""
        info = self.lookup(exercise_id)
        return info.name if info else exercise_id

    def by_muscle_group(self, muscle_group: str) -> List[ExerciseInfo]:
        merged = {**self._built_in, **self._custom}
        return [e for e in merged.values() if muscle_group in e.muscle_groups]

    def __contains__(self, exercise_id: str) -> bool:
        return self.lookup(exercise_id) is not None

    def __len__(self) -> int:
        return len({**self._built_in, **self._custom})
