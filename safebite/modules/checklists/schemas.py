from enum import Enum
from pydantic import BaseModel
from typing import List, Optional
from datetime import date as Date, datetime


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class ChecklistCreate(BaseModel):
    location_id: str
    title: str
    frequency: Frequency


class ChecklistUpdate(BaseModel):
    title: Optional[str] = None
    frequency: Optional[Frequency] = None


class TaskCreate(BaseModel):
    description: str


class SubtaskCreate(BaseModel):
    description: str


class CompletionToggle(BaseModel):
    date: Optional[Date] = None
    completed: bool = True


class SubtaskResponse(BaseModel):
    id: str
    task_id: str
    description: str
    completed: bool = False

    class Config:
        from_attributes = True


class TaskResponse(BaseModel):
    id: str
    checklist_id: str
    description: str
    subtasks: List[SubtaskResponse] = []

    class Config:
        from_attributes = True


class ChecklistResponse(BaseModel):
    id: str
    location_id: str
    title: str
    frequency: Frequency
    created_at: Optional[datetime] = None
    tasks: List[TaskResponse] = []

    class Config:
        from_attributes = True


class CompletionResponse(BaseModel):
    subtask_id: str
    user_id: str
    date: Date
    completed: bool
    completed_at: Optional[datetime] = None


class FrequencyProgress(BaseModel):
    frequency: Frequency
    done: int
    total: int
    percent: int


class ProgressResponse(BaseModel):
    location_id: str
    date: Date
    progress: List[FrequencyProgress]
