"""
Storage components.

Components:
- DynamoTablesComponent: On-demand DynamoDB tables
"""

from appre_iac.components.storage.dynamodb_tables import DynamoTablesComponent, DynamoTablesOutputs

__all__ = [
    "DynamoTablesComponent",
    "DynamoTablesOutputs",
]
