# Supabase tables: units, suppliers, food_items
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

units:
- id: uuid (primary key)
- location_id: uuid (foreign key to locations.id, not null)
- name: text (not null)
- type: text (not null) - fridge, freezer
- created_at: timestamp

suppliers:
- id: uuid (primary key)
- location_id: uuid (foreign key to locations.id, not null)
- name: text (not null)
- created_at: timestamp

food_items:
- id: uuid (primary key)
- location_id: uuid (foreign key to locations.id, not null)
- name: text (not null)
- created_at: timestamp
"""
