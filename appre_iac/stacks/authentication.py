"""
Authentication service resources.

Passwordless email sign-in: OTP, rate limit, user and session tables, the
Cognito custom-auth trigger functions and the user pool that invokes them.
All trigger functions share one role whose grants are scoped to the
deployment's environment.
"""

from pathlib import Path

from appre_iac.configs.base import EnvironmentConfig
from appre_iac.configs.constants import SERVICE_DOMAINS
from appre_iac.stacks.composer import DeploymentPlan, StackComposer, TableIndex, TableKey
from appre_iac.stacks.notifications import EMAIL_TEMPLATES
from appre_iac.utils.naming import ResourceKind
from appre_iac.utils.policies import TABLE_READ_WRITE_ACTIONS

AUTH_ROLE = "auth_lambda"
USER_POOL = "users"

OTP_TABLE = "auth_otps"
RATE_LIMIT_TABLE = "auth_rate_limits"
USERS_TABLE = "users"
SESSIONS_TABLE = "user_sessions"

# Cognito trigger -> (function base name, asset directory, memory MB)
TRIGGER_FUNCTIONS: dict[str, tuple[str, str, int]] = {
    "create_auth_challenge": ("auth_create_challenge", "create-auth-challenge", 256),
    "verify_auth_challenge_response": ("auth_verify_challenge", "verify-auth-challenge", 256),
    "define_auth_challenge": ("auth_define_challenge", "define-auth-challenge", 128),
    "pre_sign_up": ("auth_pre_signup", "pre-signup", 128),
}

# Triggers that read the auth tables and send OTP emails
CHALLENGE_TRIGGERS = frozenset({"create_auth_challenge", "verify_auth_challenge_response"})

COGNITO_ADMIN_ACTIONS = (
    "cognito-idp:AdminConfirmSignUp",
    "cognito-idp:AdminGetUser",
    "cognito-idp:AdminUpdateUserAttributes",
)


def _tables(composer: StackComposer) -> None:
    composer.group(
        "tables",
        composer.table(
            OTP_TABLE,
            partition_key=TableKey("email"),
            ttl_attribute="ttl",
        ),
        # Short-lived counters, not worth continuous backups
        composer.table(
            RATE_LIMIT_TABLE,
            partition_key=TableKey("email"),
            sort_key=TableKey("request_timestamp", "N"),
            ttl_attribute="ttl",
            point_in_time_recovery=False,
        ),
        composer.table(
            USERS_TABLE,
            partition_key=TableKey("user_id"),
            indexes=(
                TableIndex("email-index", TableKey("email")),
                TableIndex("status-index", TableKey("status"), TableKey("created_at")),
            ),
        ),
        composer.table(
            SESSIONS_TABLE,
            partition_key=TableKey("session_id"),
            ttl_attribute="expires_at",
            indexes=(
                TableIndex("user-sessions-index", TableKey("user_id"), TableKey("created_at", "N")),
                TableIndex(
                    "expires-at-index",
                    TableKey("user_id"),
                    TableKey("expires_at", "N"),
                    projection="KEYS_ONLY",
                ),
            ),
        ),
    )


def compose_authentication(config: EnvironmentConfig, account: str) -> DeploymentPlan:
    """
    Compose the authentication service plan.

    Args:
        config: Validated environment configuration
        account: AWS account id used in policy ARNs

    Returns:
        DeploymentPlan with 'tables', 'functions' and 'identity' groups
    """
    composer = StackComposer(
        config.naming,
        SERVICE_DOMAINS["authentication"],
        region=config.region,
        account=account,
    )
    namer = composer.namer

    _tables(composer)

    composer.role(AUTH_ROLE)
    composer.grant(
        AUTH_ROLE,
        TABLE_READ_WRITE_ACTIONS,
        ResourceKind.TABLE,
        [OTP_TABLE, RATE_LIMIT_TABLE, USERS_TABLE, SESSIONS_TABLE],
        sid="AuthTables",
        include_indexes=True,
    )
    composer.attach(
        AUTH_ROLE,
        composer.policies.scoped(
            ["ses:SendEmail", "ses:SendRawEmail", "ses:SendTemplatedEmail"],
            "*",
            sid="SendEmail",
            extra_conditions={"StringEquals": {"ses:FromAddress": config.from_email}},
        ),
    )
    composer.grant(
        AUTH_ROLE,
        COGNITO_ADMIN_ACTIONS,
        ResourceKind.IDENTITY_STORE,
        [USER_POOL],
        sid="CognitoAdmin",
    )

    table_env = {
        "OTP_TABLE_NAME": namer.table(OTP_TABLE),
        "RATE_LIMIT_TABLE_NAME": namer.table(RATE_LIMIT_TABLE),
        "USERS_TABLE_NAME": namer.table(USERS_TABLE),
        "SESSION_TABLE_NAME": namer.table(SESSIONS_TABLE),
    }
    template_env = {
        f"{name.upper()}_TEMPLATE_NAME": namer.template(name) for name in EMAIL_TEMPLATES
    }
    challenge_env = {**table_env, **template_env, "FROM_EMAIL": config.from_email}

    functions = []
    for trigger, (base_name, asset, memory_mb) in TRIGGER_FUNCTIONS.items():
        environment = challenge_env if trigger in CHALLENGE_TRIGGERS else {}
        functions.append(
            composer.function(
                base_name,
                role=AUTH_ROLE,
                asset=str(Path(config.lambda_asset_dir) / asset),
                memory_mb=memory_mb,
                timeout_seconds=config.lambda_timeout,
                environment=environment,
            )
        )
    composer.group("functions", *functions)

    composer.group(
        "identity",
        composer.identity_store(
            USER_POOL,
            triggers={
                trigger: base_name
                for trigger, (base_name, _, _) in TRIGGER_FUNCTIONS.items()
            },
        ),
    )
    return composer.plan()
