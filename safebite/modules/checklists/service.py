import logging
from collections import defaultdict
from datetime import date, datetime, timezone
from supabase import Client
from safebite.modules.checklists.schemas import (
    ChecklistCreate, ChecklistUpdate, ChecklistResponse, TaskCreate, TaskResponse,
    SubtaskCreate, SubtaskResponse, CompletionResponse, Frequency
)
from typing import Any, Dict, List, Optional, Set
from fastapi import HTTPException

logger = logging.getLogger(__name__)

COMPLETION_CONFLICT_COLUMNS = "subtask_id,user_id,date"


class ChecklistService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_row(self, table: str, row_id: str, not_found: str) -> Dict[str, Any]:
        result = self.supabase.table(table)\
            .select("*")\
            .eq("id", row_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail=not_found)
        return result.data[0]

    def _nest(
        self,
        checklist_rows: List[Dict[str, Any]],
        completed_subtask_ids: Optional[Set[str]] = None
    ) -> List[ChecklistResponse]:
        """Attach tasks and subtasks to checklist rows"""
        if not checklist_rows:
            return []
        completed_subtask_ids = completed_subtask_ids or set()

        checklist_ids = [row["id"] for row in checklist_rows]
        task_rows = self.supabase.table("checklist_tasks")\
            .select("*")\
            .in_("checklist_id", checklist_ids)\
            .execute().data

        subtask_rows = []
        if task_rows:
            subtask_rows = self.supabase.table("checklist_subtasks")\
                .select("*")\
                .in_("task_id", [task["id"] for task in task_rows])\
                .execute().data

        subtasks_by_task = defaultdict(list)
        for subtask in subtask_rows:
            subtasks_by_task[subtask["task_id"]].append(
                SubtaskResponse(**subtask, completed=subtask["id"] in completed_subtask_ids)
            )

        tasks_by_checklist = defaultdict(list)
        for task in task_rows:
            tasks_by_checklist[task["checklist_id"]].append(
                TaskResponse(**task, subtasks=subtasks_by_task[task["id"]])
            )

        return [
            ChecklistResponse(**row, tasks=tasks_by_checklist[row["id"]])
            for row in checklist_rows
        ]

    def list_checklists(
        self,
        location_id: str,
        frequency: Optional[Frequency] = None,
        user_id: Optional[str] = None,
        on_date: Optional[date] = None
    ) -> List[ChecklistResponse]:
        """
        List a location's checklists with nested tasks and subtasks.
        When user_id and on_date are given, subtasks carry that user's completion state for the day.
        """
        try:
            query = self.supabase.table("checklists")\
                .select("*")\
                .eq("location_id", location_id)
            if frequency is not None:
                query = query.eq("frequency", frequency.value)
            rows = query.order("title").execute().data

            completed = set()
            if user_id and on_date:
                completed = self.completed_subtask_ids(user_id, on_date)
            return self._nest(rows, completed)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error listing checklists for location {location_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to list checklists")

    def get_checklist_by_id(self, checklist_id: str) -> ChecklistResponse:
        try:
            row = self._get_row("checklists", checklist_id, "Checklist not found")
            return self._nest([row])[0]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error getting checklist {checklist_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load checklist")

    def create_checklist(self, checklist_data: ChecklistCreate) -> ChecklistResponse:
        try:
            if not checklist_data.title.strip():
                raise HTTPException(status_code=400, detail="Checklist title is required")

            result = self.supabase.table("checklists").insert({
                "location_id": checklist_data.location_id,
                "title": checklist_data.title,
                "frequency": checklist_data.frequency.value,
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create checklist")

            logger.info(f"Created {checklist_data.frequency.value} checklist {result.data[0]['id']}")
            return ChecklistResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating checklist: {e}")
            raise HTTPException(status_code=500, detail="Failed to create checklist")

    def update_checklist(self, checklist_id: str, checklist_data: ChecklistUpdate) -> ChecklistResponse:
        try:
            update_data = checklist_data.model_dump(exclude_none=True, mode="json")
            if "title" in update_data and not update_data["title"].strip():
                raise HTTPException(status_code=400, detail="Checklist title is required")
            if not update_data:
                return self.get_checklist_by_id(checklist_id)

            result = self.supabase.table("checklists")\
                .update(update_data)\
                .eq("id", checklist_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Checklist not found")

            return self._nest(result.data)[0]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating checklist {checklist_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update checklist")

    def delete_checklist(self, checklist_id: str) -> bool:
        """Delete a checklist along with its tasks, subtasks and their completions"""
        try:
            task_ids = [
                task["id"] for task in self.supabase.table("checklist_tasks")
                .select("id")
                .eq("checklist_id", checklist_id)
                .execute().data
            ]
            if task_ids:
                subtask_ids = [
                    subtask["id"] for subtask in self.supabase.table("checklist_subtasks")
                    .select("id")
                    .in_("task_id", task_ids)
                    .execute().data
                ]
                if subtask_ids:
                    self.supabase.table("checklist_subtask_completions")\
                        .delete()\
                        .in_("subtask_id", subtask_ids)\
                        .execute()
                    self.supabase.table("checklist_subtasks")\
                        .delete()\
                        .in_("id", subtask_ids)\
                        .execute()
                self.supabase.table("checklist_tasks")\
                    .delete()\
                    .in_("id", task_ids)\
                    .execute()

            result = self.supabase.table("checklists")\
                .delete()\
                .eq("id", checklist_id)\
                .execute()

            return len(result.data) > 0
        except Exception as e:
            logger.error(f"Error deleting checklist {checklist_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete checklist")

    def add_task(self, checklist_id: str, task_data: TaskCreate) -> TaskResponse:
        try:
            if not task_data.description.strip():
                raise HTTPException(status_code=400, detail="Task description is required")

            result = self.supabase.table("checklist_tasks").insert({
                "checklist_id": checklist_id,
                "description": task_data.description,
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to add task")

            return TaskResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error adding task to checklist {checklist_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to add task")

    def get_task(self, task_id: str) -> Dict[str, Any]:
        try:
            return self._get_row("checklist_tasks", task_id, "Task not found")
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error getting task {task_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load task")

    def add_subtask(self, task_id: str, subtask_data: SubtaskCreate) -> SubtaskResponse:
        try:
            if not subtask_data.description.strip():
                raise HTTPException(status_code=400, detail="Subtask description is required")

            result = self.supabase.table("checklist_subtasks").insert({
                "task_id": task_id,
                "description": subtask_data.description,
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to add subtask")

            return SubtaskResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error adding subtask to task {task_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to add subtask")

    def get_subtask(self, subtask_id: str) -> Dict[str, Any]:
        try:
            return self._get_row("checklist_subtasks", subtask_id, "Subtask not found")
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error getting subtask {subtask_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load subtask")

    def get_subtask_location_id(self, subtask_id: str) -> str:
        """Walk subtask -> task -> checklist to find the owning location"""
        subtask = self.get_subtask(subtask_id)
        task = self.get_task(subtask["task_id"])
        return self.get_checklist_by_id(task["checklist_id"]).location_id

    def set_completion(self, subtask_id: str, user_id: str, on_date: date, completed: bool) -> CompletionResponse:
        """Record one user's completion state of a subtask for a day (one row per subtask, user and date)"""
        try:
            payload = {
                "subtask_id": subtask_id,
                "user_id": user_id,
                "date": on_date.isoformat(),
                "completed": completed,
                "completed_at": datetime.now(timezone.utc).isoformat() if completed else None,
            }
            result = self.supabase.table("checklist_subtask_completions")\
                .upsert(payload, on_conflict=COMPLETION_CONFLICT_COLUMNS)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save completion")

            return CompletionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error saving completion of subtask {subtask_id} for user {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to save completion")

    def completed_subtask_ids(self, user_id: str, on_date: date) -> Set[str]:
        try:
            result = self.supabase.table("checklist_subtask_completions")\
                .select("subtask_id")\
                .eq("user_id", user_id)\
                .eq("date", on_date.isoformat())\
                .eq("completed", True)\
                .execute()
            return {row["subtask_id"] for row in result.data}
        except Exception as e:
            logger.error(f"Error loading completions for user {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load completions")
