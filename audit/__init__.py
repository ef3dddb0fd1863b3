"""
Audit trail of admin changes: payments, settlements, penalties, tenant
moves, user and settings edits.
"""
