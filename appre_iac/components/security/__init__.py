"""
Security components.

Components:
- ScopedRolesComponent: IAM roles with environment-scoped inline policies
"""

from appre_iac.components.security.iam_roles import IamRoleOutputs, ScopedRolesComponent

__all__ = [
    "IamRoleOutputs",
    "ScopedRolesComponent",
]
