"""
Pulumi component resources for Appre infrastructure.

Each submodule provides ComponentResource classes fed by deployment plans:
- storage: DynamoDB tables
- messaging: SQS queues, SES templates
- identity: Cognito user pool
- security: environment-scoped IAM roles
- compute: Lambda functions
"""
