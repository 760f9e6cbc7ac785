# gymtrack/domains/routine/service.py

from collections import defaultdict
from datetime import datetime, timezone
from gymtrack.core.constants import (
    ADMIN_OWNER_ID,
    FIELD_EXERCISES,
    FIELD_FAVORITE,
    FIELD_ROUTINE_NAME,
    FIELD_USER_ID,
)
from gymtrack.core.result import Ok, Result, invalid, not_found
from gymtrack.domains.auth.schemas import CurrentUser
from gymtrack.domains.routine.repository import (
    FirestoreRepository,
    predefined_routine_repository,
    routine_repository,
)
from gymtrack.domains.routine.schemas import Exercise, ProgressPoint, Routine, RoutineCreate
from pydantic import ValidationError
from typing import Callable, Optional
import logging

logger = logging.getLogger(__name__)

ExerciseEdit = Callable[[list], Result]


def _new_document(name: str, owner: str, exercises: list, level=None) -> dict:
    return Routine(
        name=name,
        user_id=owner,
        created_at=datetime.now(timezone.utc),
        exercises=exercises,
        level=level,
    ).model_dump(by_alias=True, exclude={"id"}, exclude_none=True)


def _dump_exercises(exercises: list[Exercise]) -> list[dict]:
    return [e.model_dump(by_alias=True) for e in exercises]


# ---------- exercise edits (list -> Ok(new list) | Err) ----------

def append_exercise(exercise: Exercise) -> ExerciseEdit:
    def edit(exercises):
        return Ok(exercises + [exercise])
    return edit


def replace_exercise(exercise_id: str, exercise: Exercise) -> ExerciseEdit:
    def edit(exercises):
        if not any(e.id == exercise_id for e in exercises):
            return not_found(f"Exercise {exercise_id} not found")
        updated = exercise.model_copy(update={"id": exercise_id})
        return Ok([updated if e.id == exercise_id else e for e in exercises])
    return edit


def drop_exercise(exercise_id: str) -> ExerciseEdit:
    def edit(exercises):
        kept = [e for e in exercises if e.id != exercise_id]
        if len(kept) == len(exercises):
            return not_found(f"Exercise {exercise_id} not found")
        return Ok(kept)
    return edit


class RoutineService:
    """Personal and predefined routines. Personal ones are scoped to the signed-in user."""

    def __init__(self, routines: FirestoreRepository = None, predefined: FirestoreRepository = None):
        self._routines = routines
        self._predefined = predefined

    @property
    def routines(self) -> FirestoreRepository:
        if self._routines is None:
            self._routines = routine_repository()
        return self._routines

    @property
    def predefined(self) -> FirestoreRepository:
        if self._predefined is None:
            self._predefined = predefined_routine_repository()
        return self._predefined

    async def edit_exercises(
        self,
        repository: FirestoreRepository,
        doc_id: str,
        edit: ExerciseEdit,
        owner: Optional[str] = None,
    ) -> Result:
        """
        Apply an exercise edit to one routine document, atomically.
        With an owner, a routine that belongs to someone else is reported as missing.
        """
        def change(data: dict) -> Result:
            if owner is not None and data.get(FIELD_USER_ID) != owner:
                return not_found(f"Routine {doc_id} not found")
            try:
                routine = Routine.from_document(doc_id, data)
            except ValidationError as e:
                logger.warning(f"⚠️ Routine {doc_id} has malformed exercises: {e.error_count()} errors")
                return invalid(f"Routine {doc_id} has malformed exercises")
            edited = edit(list(routine.exercises))
            if not edited.ok:
                return edited
            return Ok({FIELD_EXERCISES: _dump_exercises(edited.value)})

        return await repository.mutate(doc_id, change)

    # ---------- personal routines ----------

    async def save_routine(self, user: CurrentUser, data: RoutineCreate) -> Result:
        return await self.routines.add(
            _new_document(data.name, user.uid, data.exercises, data.level)
        )

    async def list_routines(self, user: CurrentUser) -> Result:
        result = await self.routines.list(where=(FIELD_USER_ID, "==", user.uid))
        if not result.ok:
            return result
        routines = [Routine.from_document(doc_id, data) for doc_id, data in result.value]
        logger.info(f"User {user.uid}: {len(routines)} routines")
        return Ok(routines)

    async def list_favorites(self, user: CurrentUser) -> Result:
        result = await self.list_routines(user)
        if not result.ok:
            return result
        return Ok([r for r in result.value if r.favorite])

    async def _get_owned(self, user: CurrentUser, routine_id: str) -> Result:
        """Routine of this user. Someone else's routine is reported as missing."""
        result = await self.routines.get(routine_id)
        if not result.ok:
            return result
        routine = Routine.from_document(routine_id, result.value)
        if routine.user_id != user.uid:
            return not_found(f"Routine {routine_id} not found")
        return Ok(routine)

    async def delete_routine(self, user: CurrentUser, routine_id: str) -> Result:
        owned = await self._get_owned(user, routine_id)
        if not owned.ok:
            return owned
        return await self.routines.delete(routine_id)

    async def set_favorite(self, user: CurrentUser, routine_id: str, favorite: bool) -> Result:
        owned = await self._get_owned(user, routine_id)
        if not owned.ok:
            return owned
        return await self.routines.update(routine_id, {FIELD_FAVORITE: favorite})

    async def add_exercise(self, user: CurrentUser, routine_id: str, exercise: Exercise) -> Result:
        return await self.edit_exercises(self.routines, routine_id, append_exercise(exercise), owner=user.uid)

    async def update_exercise(
        self, user: CurrentUser, routine_id: str, exercise_id: str, exercise: Exercise
    ) -> Result:
        return await self.edit_exercises(
            self.routines, routine_id, replace_exercise(exercise_id, exercise), owner=user.uid
        )

    async def remove_exercise(self, user: CurrentUser, routine_id: str, exercise_id: str) -> Result:
        return await self.edit_exercises(self.routines, routine_id, drop_exercise(exercise_id), owner=user.uid)

    # ---------- predefined routines ----------

    async def list_predefined(self) -> Result:
        result = await self.predefined.list()
        if not result.ok:
            return result
        return Ok([Routine.from_document(doc_id, data) for doc_id, data in result.value])

    async def copy_predefined(self, user: CurrentUser, predefined_id: str) -> Result:
        """Copy a predefined routine into the user's own routines"""
        source = await self.predefined.get(predefined_id)
        if not source.ok:
            return source
        routine = Routine.from_document(predefined_id, source.value)
        return await self.routines.add(
            _new_document(routine.name, user.uid, routine.exercises, routine.level)
        )

    async def save_predefined(self, data: RoutineCreate) -> Result:
        """Publish a predefined routine. The document write triggers the broadcast function."""
        return await self.predefined.add(
            _new_document(data.name, ADMIN_OWNER_ID, data.exercises, data.level)
        )

    async def delete_predefined(self, name: str) -> Result:
        found = await self.predefined.find_first(FIELD_ROUTINE_NAME, name)
        if not found.ok:
            return found
        doc_id, _ = found.value
        return await self.predefined.delete(doc_id)

    async def edit_predefined_exercises(self, name: str, edit: ExerciseEdit) -> Result:
        """Predefined routines are addressed by name; the first match is edited"""
        found = await self.predefined.find_first(FIELD_ROUTINE_NAME, name)
        if not found.ok:
            return found
        doc_id, _ = found.value
        return await self.edit_exercises(self.predefined, doc_id, edit)

    async def add_predefined_exercise(self, name: str, exercise: Exercise) -> Result:
        return await self.edit_predefined_exercises(name, append_exercise(exercise))

    async def update_predefined_exercise(self, name: str, exercise_id: str, exercise: Exercise) -> Result:
        return await self.edit_predefined_exercises(name, replace_exercise(exercise_id, exercise))

    async def remove_predefined_exercise(self, name: str, exercise_id: str) -> Result:
        return await self.edit_predefined_exercises(name, drop_exercise(exercise_id))

    # ---------- progress ----------

    async def exercise_progress_by_name(self, user: CurrentUser) -> Result:
        """Exercise name -> weight points sorted by date. Only exercises with weight count."""
        result = await self.list_routines(user)
        if not result.ok:
            return result

        progress = defaultdict(list)
        for routine in result.value:
            if routine.created_at is None:
                continue
            for exercise in routine.exercises:
                if exercise.weight > 0 and exercise.name.strip():
                    progress[exercise.name].append(
                        ProgressPoint(day=routine.created_at.date(), weight=exercise.weight)
                    )

        return Ok({name: sorted(points, key=lambda p: p.day) for name, points in progress.items()})

    async def weighted_exercise_names(self, user: CurrentUser) -> Result:
        result = await self.exercise_progress_by_name(user)
        if not result.ok:
            return result
        return Ok(sorted(result.value))

    async def exercise_progress(self, user: CurrentUser, exercise_name: str) -> Result:
        result = await self.exercise_progress_by_name(user)
        if not result.ok:
            return result
        return Ok(result.value.get(exercise_name, []))

    async def sets_by_muscle_group(self, user: CurrentUser) -> Result:
        """Total series per muscle group over all of the user's routines"""
        result = await self.list_routines(user)
        if not result.ok:
            return result

        totals = defaultdict(int)
        for routine in result.value:
            for exercise in routine.exercises:
                if exercise.muscle_group.strip():
                    totals[exercise.muscle_group] += exercise.sets
        return Ok(dict(totals))


routine_service = RoutineService()
