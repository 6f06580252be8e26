from .config import Environment, GateConfig, LogLevel, load_config_from_env
from .exceptions import (
    AuthenticationMissingError,
    AuthorizationDeniedError,
    BrokenChainError,
    ConfigurationError,
    EdugateError,
    InvalidIdentifierError,
    ResourceNotFoundError,
    StoreFailureError,
    failure_body,
)
from .gate import CustomPredicate, Gate, GateResult, parse_resource_id
from .logging import (
    GateLogFormatter,
    RequestLoggerAdapter,
    get_request_logger,
    redact_secrets,
    safe_log_value,
    safe_preview,
    setup_logging,
)
from .models import (
    Assessment,
    Milestone,
    Principal,
    Project,
    ResourceDescriptor,
    ResourceKind,
    Role,
    Submission,
    Team,
    TeamMember,
    Tier,
    parse_resource,
)
from .permissions import (
    ROLE_MATRIX,
    SCHOOL_SCOPE_KINDS,
    TIER_REQUIREMENTS,
    Action,
    Decision,
    PolicyEvaluator,
    ReasonCode,
    evaluate,
    requires_tier,
)
from .resolver import MAX_CHAIN_DEPTH, RequestScope, ResourceResolver
from .stores import InMemoryResourceStore, RedisResourceStore, ResourceStore

__all__ = [
    # Config
    'Environment',
    'GateConfig',
    'LogLevel',
    'load_config_from_env',
    # Errors
    'AuthenticationMissingError',
    'AuthorizationDeniedError',
    'BrokenChainError',
    'ConfigurationError',
    'EdugateError',
    'InvalidIdentifierError',
    'ResourceNotFoundError',
    'StoreFailureError',
    'failure_body',
    # Gate
    'CustomPredicate',
    'Gate',
    'GateResult',
    'parse_resource_id',
    # Logging
    'GateLogFormatter',
    'RequestLoggerAdapter',
    'get_request_logger',
    'redact_secrets',
    'safe_log_value',
    'safe_preview',
    'setup_logging',
    # Models
    'Assessment',
    'Milestone',
    'Principal',
    'Project',
    'ResourceDescriptor',
    'ResourceKind',
    'Role',
    'Submission',
    'Team',
    'TeamMember',
    'Tier',
    'parse_resource',
    # Policy
    'ROLE_MATRIX',
    'SCHOOL_SCOPE_KINDS',
    'TIER_REQUIREMENTS',
    'Action',
    'Decision',
    'PolicyEvaluator',
    'ReasonCode',
    'evaluate',
    'requires_tier',
    # Resolution
    'MAX_CHAIN_DEPTH',
    'RequestScope',
    'ResourceResolver',
    # Stores
    'InMemoryResourceStore',
    'RedisResourceStore',
    'ResourceStore',
]
