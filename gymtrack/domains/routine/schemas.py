# gymtrack/domains/routine/schemas.py

from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Optional
from uuid import uuid4

# Attribute names are English; aliases are the Firestore field names the apps read


class Exercise(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # stable across rewrites of the ejercicios array; edits and deletes go by id
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str = Field("", alias="nombre")
    muscle_group: str = Field("", alias="grupoMuscular")
    type: str = Field("", alias="tipo")
    sets: int = Field(0, alias="series", ge=0)
    reps: int = Field(0, alias="reps", ge=0)
    duration: int = Field(0, alias="duracion", ge=0)
    intensity: str = Field("", alias="intensidad")
    weight: int = Field(0, alias="peso", ge=0)


class RoutineCreate(BaseModel):
    """New routine (personal or predefined)"""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., alias="nombreRutina", min_length=1)
    exercises: list[Exercise] = Field(default_factory=list, alias="ejercicios")
    level: Optional[str] = Field(None, alias="nivel")


class Routine(BaseModel):
    """Stored routine document"""
    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    name: str = Field("", alias="nombreRutina")
    user_id: str = Field("", alias="userId")
    created_at: Optional[datetime] = Field(None, alias="fechaCreacion")
    exercises: list[Exercise] = Field(default_factory=list, alias="ejercicios")
    favorite: bool = Field(False, alias="esFavorita")
    level: Optional[str] = Field(None, alias="nivel")

    @classmethod
    def from_document(cls, doc_id: str, data: dict) -> "Routine":
        return cls.model_validate({**data, "id": doc_id})


class FavoriteUpdate(BaseModel):
    favorite: bool


class ProgressPoint(BaseModel):
    """Weight lifted in one exercise, dated by the routine it belongs to"""
    day: date
    weight: int
