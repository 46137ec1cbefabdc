# Supabase tables: profiles, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- email: text (not null) - synced from auth.users
- full_name: text (nullable)
- company_id: uuid (foreign key to companies.id, nullable only for super_user)
- role: text (not null) - one of super_user, company_admin, ops, manager
- location_ids: uuid[] (default: '{}') - locations a manager may act on
- created_at: timestamp (default: now())

Note: Authentication data (password, tokens) is stored in auth.users table
managed by Supabase Auth. Row level security on profiles mirrors the
company scoping applied by the API.
"""
