"""
Identity components.

Components:
- CognitoUserPoolComponent: User pool and app client for custom auth
"""

from appre_iac.components.identity.cognito_user_pool import CognitoOutputs, CognitoUserPoolComponent

__all__ = [
    "CognitoOutputs",
    "CognitoUserPoolComponent",
]
