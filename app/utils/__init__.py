from .responses import ok, error, validation_error_response
from .auth import auth_required, role_required, load_caller, caller_context
from .validation import validate_schema
from .db import transactional
from .jwt import (
    create_access_token,
    create_wallet_session_token,
    create_wallet_proof_token,
    decode_token,
    TokenError,
)

__all__ = [
    'ok',
    'error',
    'validation_error_response',
    'auth_required',
    'role_required',
    'load_caller',
    'caller_context',
    'create_access_token',
    'create_wallet_session_token',
    'create_wallet_proof_token',
    'decode_token',
    'TokenError',
    'validate_schema',
    'transactional',
]
