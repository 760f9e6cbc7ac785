# gymtrack/domains/routine/router.py

from fastapi import APIRouter, Depends, HTTPException, status
from gymtrack.core.result import BACKEND, INVALID, NOT_FOUND, Result
from gymtrack.domains.auth.schemas import CurrentUser
from gymtrack.domains.auth.token_handler import require_admin, verify_token
from gymtrack.domains.routine.schemas import Exercise, FavoriteUpdate, ProgressPoint, Routine, RoutineCreate
from gymtrack.domains.routine.service import RoutineService, routine_service

router = APIRouter()
predefined_router = APIRouter()

ERROR_STATUS = {
    NOT_FOUND: status.HTTP_404_NOT_FOUND,
    INVALID: status.HTTP_400_BAD_REQUEST,
    BACKEND: status.HTTP_502_BAD_GATEWAY,
}


def get_routine_service() -> RoutineService:
    return routine_service


def unwrap(result: Result):
    """Ok -> value, Err -> HTTPException"""
    if result.ok:
        return result.value
    raise HTTPException(
        status_code=ERROR_STATUS.get(result.error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=result.error.message,
    )


# ---------- personal routines ----------

@router.get("/", response_model=list[Routine])
async def list_routines(
    user: CurrentUser = Depends(verify_token),
    service: RoutineService = Depends(get_routine_service)
):
    return unwrap(await service.list_routines(user))


@router.post("/", status_code=status.HTTP_201_CREATED)
async def save_routine(
    body: RoutineCreate,
    user: CurrentUser = Depends(verify_token),
    service: RoutineService = Depends(get_routine_service)
):
    routine_id = unwrap(await service.save_routine(user, body))
    return {"status": "success", "id": routine_id}


@router.get("/favorites", response_model=list[Routine])
async def list_favorites(
    user: CurrentUser = Depends(verify_token),
    service: RoutineService = Depends(get_routine_service)
):
    return unwrap(await service.list_favorites(user))


@router.delete("/{routine_id}")
async def delete_routine(
    routine_id: str,
    user: CurrentUser = Depends(verify_token),
    service: RoutineService = Depends(get_routine_service)
):
    unwrap(await service.delete_routine(user, routine_id))
    return {"status": "success"}


@router.put("/{routine_id}/favorite")
async def set_favorite(
    routine_id: str,
    body: FavoriteUpdate,
    user: CurrentUser = Depends(verify_token),
    service: RoutineService = Depends(get_routine_service)
):
    unwrap(await service.set_favorite(user, routine_id, body.favorite))
    return {"status": "success", "favorite": body.favorite}


@router.post("/{routine_id}/exercises")
async def add_exercise(
    routine_id: str,
    body: Exercise,
    user: CurrentUser = Depends(verify_token),
    service: RoutineService = Depends(get_routine_service)
):
    unwrap(await service.add_exercise(user, routine_id, body))
    return {"status": "success", "id": body.id}


@router.put("/{routine_id}/exercises/{exercise_id}")
async def update_exercise(
    routine_id: str,
    exercise_id: str,
    body: Exercise,
    user: CurrentUser = Depends(verify_token),
    service: RoutineService = Depends(get_routine_service)
):
    unwrap(await service.update_exercise(user, routine_id, exercise_id, body))
    return {"status": "success", "id": exercise_id}


@router.delete("/{routine_id}/exercises/{exercise_id}")
async def remove_exercise(
    routine_id: str,
    exercise_id: str,
    user: CurrentUser = Depends(verify_token),
    service: RoutineService = Depends(get_routine_service)
):
    unwrap(await service.remove_exercise(user, routine_id, exercise_id))
    return {"status": "success"}


# ---------- progress ----------

@router.get("/progress", response_model=dict[str, list[ProgressPoint]])
async def all_exercise_progress(
    user: CurrentUser = Depends(verify_token),
    service: RoutineService = Depends(get_routine_service)
):
    return unwrap(await service.exercise_progress_by_name(user))


@router.get("/progress/exercises", response_model=list[str])
async def weighted_exercise_names(
    user: CurrentUser = Depends(verify_token),
    service: RoutineService = Depends(get_routine_service)
):
    """Exercises that have a weight recorded, for the progress selector"""
    return unwrap(await service.weighted_exercise_names(user))


@router.get("/progress/exercises/{exercise_name}", response_model=list[ProgressPoint])
async def exercise_progress(
    exercise_name: str,
    user: CurrentUser = Depends(verify_token),
    service: RoutineService = Depends(get_routine_service)
):
    return unwrap(await service.exercise_progress(user, exercise_name))


@router.get("/progress/muscle-groups", response_model=dict[str, int])
async def sets_by_muscle_group(
    user: CurrentUser = Depends(verify_token),
    service: RoutineService = Depends(get_routine_service)
):
    return unwrap(await service.sets_by_muscle_group(user))


# ---------- predefined routines ----------

@predefined_router.get("/", response_model=list[Routine])
async def list_predefined(
    user: CurrentUser = Depends(verify_token),
    service: RoutineService = Depends(get_routine_service)
):
    return unwrap(await service.list_predefined())


@predefined_router.post("/", status_code=status.HTTP_201_CREATED)
async def save_predefined(
    body: RoutineCreate,
    admin: CurrentUser = Depends(require_admin),
    service: RoutineService = Depends(get_routine_service)
):
    """
    Publish a predefined routine (admin)

    - subscribed devices get a "new routine" push once the document exists
    """
    routine_id = unwrap(await service.save_predefined(body))
    return {"status": "success", "id": routine_id}


@predefined_router.delete("/{name}")
async def delete_predefined(
    name: str,
    admin: CurrentUser = Depends(require_admin),
    service: RoutineService = Depends(get_routine_service)
):
    unwrap(await service.delete_predefined(name))
    return {"status": "success"}


@predefined_router.post("/{predefined_id}/copy", status_code=status.HTTP_201_CREATED)
async def copy_predefined(
    predefined_id: str,
    user: CurrentUser = Depends(verify_token),
    service: RoutineService = Depends(get_routine_service)
):
    routine_id = unwrap(await service.copy_predefined(user, predefined_id))
    return {"status": "success", "id": routine_id}


@predefined_router.post("/{name}/exercises")
async def add_predefined_exercise(
    name: str,
    body: Exercise,
    admin: CurrentUser = Depends(require_admin),
    service: RoutineService = Depends(get_routine_service)
):
    unwrap(await service.add_predefined_exercise(name, body))
    return {"status": "success", "id": body.id}


@predefined_router.put("/{name}/exercises/{exercise_id}")
async def update_predefined_exercise(
    name: str,
    exercise_id: str,
    body: Exercise,
    admin: CurrentUser = Depends(require_admin),
    service: RoutineService = Depends(get_routine_service)
):
    unwrap(await service.update_predefined_exercise(name, exercise_id, body))
    return {"status": "success", "id": exercise_id}


@predefined_router.delete("/{name}/exercises/{exercise_id}")
async def remove_predefined_exercise(
    name: str,
    exercise_id: str,
    admin: CurrentUser = Depends(require_admin),
    service: RoutineService = Depends(get_routine_service)
):
    unwrap(await service.remove_predefined_exercise(name, exercise_id))
    return {"status": "success"}
