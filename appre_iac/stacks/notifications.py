"""
Notification service resources.

Email templates, the email queue with its dead letter queue, and the email
processor function. The processor's role may only read templates and
consume queues tagged with its own environment.
"""

from pathlib import Path

from appre_iac.configs.base import EnvironmentConfig
from appre_iac.configs.constants import SERVICE_DOMAINS, SQS_DEFAULTS
from appre_iac.stacks.composer import DeploymentPlan, StackComposer
from appre_iac.utils.naming import ResourceKind
from appre_iac.utils.policies import QUEUE_CONSUME_ACTIONS

EMAIL_PROCESSOR = "email_processor"
EMAIL_QUEUE = "email_queue"
EMAIL_DLQ = "email_dlq"

# base name -> (subject, html, text)
EMAIL_TEMPLATES: dict[str, tuple[str, str, str]] = {
    "otp": (
        "Your verification code",
        "<html><body>"
        "<h2>Your verification code</h2>"
        "<p>Your verification code is: <strong>{{otp}}</strong></p>"
        "<p>This code will expire in 10 minutes.</p>"
        "<p>If you didn't request this code, please ignore this email.</p>"
        "</body></html>",
        "Your verification code is: {{otp}}\n\n"
        "This code will expire in 10 minutes.\n\n"
        "If you didn't request this code, please ignore this email.",
    ),
    "welcome": (
        "Welcome to Appre!",
        "<html><body>"
        "<h2>Welcome to Appre, {{firstName}}!</h2>"
        "<p>Thank you for joining our platform for content creators.</p>"
        "<p>You can now start accepting payments from your audience.</p>"
        "<p><a href=\"{{dashboardUrl}}\">Go to Dashboard</a></p>"
        "</body></html>",
        "Welcome to Appre, {{firstName}}!\n\n"
        "Thank you for joining our platform for content creators.\n\n"
        "Dashboard: {{dashboardUrl}}",
    ),
    "complete_registration_user_info": (
        "Complete your Appre profile",
        "<html><body>"
        "<h2>Complete your profile</h2>"
        "<p>Hi {{firstName}},</p>"
        "<p>To start receiving payments, please complete your profile information.</p>"
        "<p><a href=\"{{profileUrl}}\">Complete Profile</a></p>"
        "<p><a href=\"{{unsubscribeUrl}}\">Unsubscribe</a></p>"
        "</body></html>",
        "Hi {{firstName}},\n\n"
        "To start receiving payments, please complete your profile information.\n\n"
        "Complete Profile: {{profileUrl}}\n\n"
        "Unsubscribe: {{unsubscribeUrl}}",
    ),
    "complete_registration_stripe": (
        "Set up your payment account",
        "<html><body>"
        "<h2>Set up your payment account</h2>"
        "<p>Hi {{firstName}},</p>"
        "<p>To receive payments, please set up your Stripe account.</p>"
        "<p><a href=\"{{stripeSetupUrl}}\">Set up Stripe Account</a></p>"
        "<p><a href=\"{{unsubscribeUrl}}\">Unsubscribe</a></p>"
        "</body></html>",
        "Hi {{firstName}},\n\n"
        "To receive payments, please set up your Stripe account.\n\n"
        "Set up Stripe Account: {{stripeSetupUrl}}\n\n"
        "Unsubscribe: {{unsubscribeUrl}}",
    ),
    "newsletter": (
        "{{subject}}",
        "<html><body>"
        "<h2>{{subject}}</h2>"
        "<div>{{content}}</div>"
        "{{#ctaText}}<p><a href=\"{{ctaUrl}}\">{{ctaText}}</a></p>{{/ctaText}}"
        "<p><small><a href=\"{{unsubscribeUrl}}\">Unsubscribe</a></small></p>"
        "</body></html>",
        "{{subject}}\n\n{{content}}\n\n"
        "{{#ctaText}}{{ctaText}}: {{ctaUrl}}{{/ctaText}}\n\n"
        "Unsubscribe: {{unsubscribeUrl}}",
    ),
}


def compose_notifications(config: EnvironmentConfig, account: str) -> DeploymentPlan:
    """
    Compose the notification service plan.

    Args:
        config: Validated environment configuration
        account: AWS account id used in policy ARNs

    Returns:
        DeploymentPlan with 'templates', 'queues' and 'functions' groups
    """
    composer = StackComposer(
        config.naming,
        SERVICE_DOMAINS["notifications"],
        region=config.region,
        account=account,
    )

    composer.group("templates", *(
        composer.template(name, subject=subject, html=html, text=text)
        for name, (subject, html, text) in EMAIL_TEMPLATES.items()
    ))

    composer.group(
        "queues",
        composer.queue(EMAIL_DLQ, retention_seconds=SQS_DEFAULTS["dlq_retention_seconds"]),
        composer.queue(EMAIL_QUEUE, dead_letter=EMAIL_DLQ),
    )

    composer.role(EMAIL_PROCESSOR)
    # Sending identities are tagged with the environment as well
    composer.attach(
        EMAIL_PROCESSOR,
        composer.policies.scoped(
            ["ses:SendEmail", "ses:SendRawEmail", "ses:SendTemplatedEmail"],
            "*",
            sid="SendEmail",
            extra_conditions={"StringEquals": {"ses:FromAddress": config.from_email}},
        ),
    )
    composer.grant(
        EMAIL_PROCESSOR,
        ["ses:GetTemplate"],
        ResourceKind.TEMPLATE,
        EMAIL_TEMPLATES,
        sid="ReadTemplates",
    )
    composer.attach(
        EMAIL_PROCESSOR,
        composer.policies.exempt(
            ["ses:ListTemplates"],
            "*",
            sid="ListTemplates",
        ),
    )
    composer.grant(
        EMAIL_PROCESSOR,
        QUEUE_CONSUME_ACTIONS,
        ResourceKind.QUEUE,
        [EMAIL_QUEUE, EMAIL_DLQ],
        sid="ConsumeEmailQueues",
    )

    template_env = {
        f"{name.upper()}_TEMPLATE_NAME": composer.namer.template(name)
        for name in EMAIL_TEMPLATES
    }
    composer.group(
        "functions",
        composer.function(
            EMAIL_PROCESSOR,
            role=EMAIL_PROCESSOR,
            asset=str(Path(config.lambda_asset_dir) / "email-processor"),
            memory_mb=config.lambda_memory,
            timeout_seconds=config.lambda_timeout,
            environment={"FROM_EMAIL": config.from_email, **template_env},
            queue_source=EMAIL_QUEUE,
        ),
    )
    return composer.plan()
