"""
Checklist completion progress.

Progress is counted in subtasks: a checklist's total is the number of
subtasks under all of its tasks, and done is how many of those the user
has marked complete for the day.
"""

import math
from typing import Dict, Iterable, List, Set

from safebite.modules.checklists.schemas import ChecklistResponse, Frequency, FrequencyProgress


def completion_percent(done: int, total: int) -> int:
    """Whole percent, halves rounded up; 0 when there is nothing to do"""
    if total <= 0:
        return 0
    return int(math.floor(done * 100 / total + 0.5))


def compute_progress(
    checklists: Iterable[ChecklistResponse],
    completed_subtask_ids: Set[str]
) -> List[FrequencyProgress]:
    """Done / total / percent for every frequency, in daily-weekly-monthly order"""
    totals: Dict[Frequency, int] = {frequency: 0 for frequency in Frequency}
    done: Dict[Frequency, int] = {frequency: 0 for frequency in Frequency}

    for checklist in checklists:
        for task in checklist.tasks:
            for subtask in task.subtasks:
                totals[checklist.frequency] += 1
                if subtask.id in completed_subtask_ids:
                    done[checklist.frequency] += 1

    return [
        FrequencyProgress(
            frequency=frequency,
            done=done[frequency],
            total=totals[frequency],
            percent=completion_percent(done[frequency], totals[frequency])
        )
        for frequency in Frequency
    ]
