from .admin import UNSET, AuthorizationAdmin
from .cache import PermissionCache
from .config import AccessConfig, LogLevel, load_config_from_env
from .exceptions import (
    AccessMaskError,
    CacheError,
    ConfigurationError,
    EncodingError,
    NotFoundError,
)
from .gate import AuthorizationGate
from .interfaces import InMemoryUserStore, UserRecord, UserStore
from .logging import (
    AccessLogFormatter,
    UserLoggerAdapter,
    get_user_logger,
    redact_secrets,
    safe_log_value,
    safe_preview,
    setup_logging,
)
from .permissions import (
    DEFAULT_FEATURES,
    ActionSpec,
    Actions,
    AuthorizationSummary,
    EffectivePermissions,
    FeatureConfig,
    FeatureGrant,
    FeatureRegistry,
    PermissionCodec,
    PermissionResolver,
    SecurityLevel,
)
from .services import AuthorizationServices, build_services

__all__ = [
    'AccessConfig',
    'LogLevel',
    'load_config_from_env',
    'AccessMaskError',
    'CacheError',
    'ConfigurationError',
    'EncodingError',
    'NotFoundError',
    'AccessLogFormatter',
    'UserLoggerAdapter',
    'get_user_logger',
    'redact_secrets',
    'safe_log_value',
    'safe_preview',
    'setup_logging',
    'DEFAULT_FEATURES',
    'ActionSpec',
    'Actions',
    'AuthorizationSummary',
    'EffectivePermissions',
    'FeatureConfig',
    'FeatureGrant',
    'FeatureRegistry',
    'PermissionCodec',
    'PermissionResolver',
    'SecurityLevel',
    'InMemoryUserStore',
    'UserRecord',
    'UserStore',
    'PermissionCache',
    'AuthorizationGate',
    'AuthorizationAdmin',
    'UNSET',
    'AuthorizationServices',
    'build_services',
]
