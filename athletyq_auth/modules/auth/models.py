# Supabase Auth
# This module uses Supabase's built-in authentication system
# No custom tables are required - Supabase Auth handles:
# - Account registration (auth.users table)
# - Confirmation emails and one-time token verification
# - Session (access/refresh token) issuance

"""
Supabase Auth calls used here:
- auth.sign_up() - Register the account and send the confirmation email
- auth.verify_otp() - Exchange the emailed token_hash for a confirmed account
- auth.set_session() - Activate a session from fragment-delivered tokens
- auth.get_user() - Resolve a bearer token to its account

Signup data is kept in user_metadata until the account is confirmed:
- full_name: text
- role: athlete | coach | organization
- email: copy of the account email

The profiles row is built from this metadata after confirmation
(see modules/profiles/models.py).
"""
