# Supabase tables: checklists, checklist_tasks, checklist_subtasks, checklist_subtask_completions
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

checklists:
- id: uuid (primary key)
- location_id: uuid (foreign key to locations.id, not null)
- title: text (not null)
- frequency: text (not null) - daily, weekly, monthly
- created_at: timestamp

checklist_tasks:
- id: uuid (primary key)
- checklist_id: uuid (foreign key to checklists.id, on delete cascade)
- description: text (not null)

checklist_subtasks:
- id: uuid (primary key)
- task_id: uuid (foreign key to checklist_tasks.id, on delete cascade)
- description: text (not null)

checklist_subtask_completions:
- subtask_id: uuid (foreign key to checklist_subtasks.id, on delete cascade)
- user_id: uuid (foreign key to profiles.id)
- date: date (not null)
- completed: boolean (default false)
- completed_at: timestamp (nullable)
- unique (subtask_id, user_id, date)
"""
