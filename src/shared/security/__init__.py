from .jwt import AuthError, decode_jwt, parse_bearer

__all__ = [
    "AuthError",
    "decode_jwt",
    "parse_bearer",
]
