# Supabase table: locations
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

locations:
- id: uuid (primary key)
- company_id: uuid (foreign key to companies.id, not null)
- name: text (not null)
- address: text (nullable)
- phone: text (nullable)
- created_at: timestamp (default: now())

Temperature logs and checklists are scoped by location_id; managers reach a
location only through profiles.location_ids.
"""
