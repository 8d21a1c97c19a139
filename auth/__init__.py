"""
Reviewer authentication against Supabase Auth.
"""
