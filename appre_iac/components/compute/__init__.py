"""
Compute components.

Components:
- LambdaFunctionsComponent: Custom runtime Lambda functions
"""

from appre_iac.components.compute.lambda_functions import LambdaFunctionsComponent, LambdaOutputs

__all__ = [
    "LambdaFunctionsComponent",
    "LambdaOutputs",
]
