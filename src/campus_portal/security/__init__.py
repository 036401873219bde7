from .passwords import hash_password, verify_password
from .tokens import Identity, decode_token, issue_token

__all__ = ["hash_password", "verify_password", "Identity", "decode_token", "issue_token"]
