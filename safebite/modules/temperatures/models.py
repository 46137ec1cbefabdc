# Supabase table: temperatures
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

temperatures:
- id: uuid (primary key)
- location_id: uuid (foreign key to locations.id, not null)
- type: text (not null) - fridge, freezer, food, delivery
- value: numeric (not null) - degrees Celsius
- unit_id: uuid (foreign key to units.id, nullable) - set for fridge and freezer readings
- food_item_id: uuid (foreign key to food_items.id, nullable) - set for food readings
- supplier_id: uuid (foreign key to suppliers.id, nullable) - set for delivery readings
- created_by: uuid (foreign key to profiles.id)
- timestamp: timestamp (not null)
- corrective_action: text (nullable) - note recorded after an unsafe reading
"""
