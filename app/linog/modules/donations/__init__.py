"""
Donation and contact entries. Read-only through the API; `is_active` controls visibility.
"""
