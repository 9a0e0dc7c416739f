"""
Database Schemas for Pill Reminder App

Each Pydantic model represents a MongoDB collection. The collection name is the
lowercase class name (e.g., Medication -> "medication").
"""
from pydantic import BaseModel, Field
from typing import List, Literal, Optional, Union

Category = Literal["morning", "evening"]

class ScheduleDay(BaseModel):
    """One day of a fortnightly schedule."""
    morning: bool = Field(False, description="Morning dose applies on this day")
    evening: bool = Field(False, description="Evening dose applies on this day")

class Medication(BaseModel):
    """Medications prescribed to a patient.
    Collection: medication
    """
    name: str = Field(..., description="Medication name")
    patient_id: Optional[str] = Field(None, description="Owning patient record")
    morning_dosage: Optional[Union[int, float, str]] = Field(None, description="Morning dose count, e.g. 2")
    evening_dosage: Optional[Union[int, float, str]] = Field(None, description="Evening dose count, e.g. 1")
    schedule: Optional[List[Optional[ScheduleDay]]] = Field(
        None, description="Explicit 14-day schedule; entries 0-6 are week A, 7-13 week B"
    )
    notes: Optional[str] = Field(None, description="Additional notes")
    active: bool = Field(True, description="Whether this medication is active")

class Intake(BaseModel):
    """Log of medications marked taken for a time-of-day category.
    Collection: intake
    """
    medication_ids: List[str] = Field(..., description="IDs of the medication documents taken")
    category: Category = Field(..., description="Time-of-day category")
    date: Optional[str] = Field(None, description="Calendar date in YYYY-MM-DD")
    taken_at: Optional[str] = Field(None, description="ISO timestamp when marked taken")
    patient_id: Optional[str] = Field(None, description="Owning patient record")
