"""
Messaging components for email delivery.

Components:
- SqsQueuesComponent: Queues and dead letter queues
- SesTemplatesComponent: SES email templates
"""

from appre_iac.components.messaging.ses_templates import SesTemplatesComponent, SesTemplatesOutputs
from appre_iac.components.messaging.sqs_queues import SqsQueuesComponent, SqsOutputs

__all__ = [
    "SesTemplatesComponent",
    "SesTemplatesOutputs",
    "SqsQueuesComponent",
    "SqsOutputs",
]
