"""
Lock Table Module
Pay-per-request DynamoDB table keyed on LockID
"""

from .functions import LOCK_HASH_KEY, TableDeclaration, create_lock_table, declare_lock_table

__all__ = [
    "LOCK_HASH_KEY",
    "TableDeclaration",
    "create_lock_table",
    "declare_lock_table",
]
