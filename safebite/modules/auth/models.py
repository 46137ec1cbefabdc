# Supabase Auth
# This module uses Supabase's built-in authentication system
# No custom tables are required - Supabase Auth handles:
# - User registration (auth.users table)
# - User login and session management
# - JWT token generation and validation
# - Password hashing and security

"""
Supabase Auth provides:
- auth.sign_up() - Register new users
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Get current user from JWT token
- auth.sign_out() - Logout users
- auth.admin.create_user() - Provision users (service role key only)

Role, company and location assignments do not live in auth.users metadata;
they are read from the profiles table (see users/models.py) on every
session, so an admin edit takes effect on the next request.
"""
