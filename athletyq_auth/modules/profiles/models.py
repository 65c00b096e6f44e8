# Supabase table: profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in repository.py
# Account data (email, password, user_metadata) lives in auth.users

"""
Expected Supabase table structure:

profiles:
- user_id: uuid (primary key, references auth.users.id)
- full_name: text (not null)
- role: text (not null) - one of athlete, coach, organization
- email: text (not null)
- created_at: timestamp (default: now())

The primary key on user_id is what makes profile creation idempotent:
a second insert for the same account fails with Postgres error 23505,
which the repository reports as InsertOutcome.ALREADY_EXISTED.
"""

PROFILES_TABLE = "profiles"
UNIQUE_VIOLATION = "23505"
