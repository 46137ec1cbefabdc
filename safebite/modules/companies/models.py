# Supabase table: companies
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

companies:
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
- address: text (nullable)
- phone: text (nullable)
- email: text (nullable)
- is_active: boolean (default: true)
- created_at: timestamp (default: now())

A company is the tenant boundary: locations.company_id and
profiles.company_id point here. Deleting a company cascades to its
locations and their records.
"""
