"""Bootstrap token enrichment."""
from dataclasses import replace
from typing import List, Sequence

from ..models import BootstrapToken, BootstrapTokenString
from ..utils import random_string

TOKEN_ID_LENGTH = 6
TOKEN_SECRET_LENGTH = 16


def enrich_bootstrap_tokens(tokens: Sequence[BootstrapToken]) -> List[BootstrapToken]:
    """Return a copy of ``tokens`` whose first entry has an id and a secret.

    An empty sequence yields a single generated token. Entries past the first
    are returned untouched, and the input sequence is never mutated.
    """
    first = tokens[0] if tokens else BootstrapToken()
    return [enrich_bootstrap_token(first), *tokens[1:]]


def enrich_bootstrap_token(token: BootstrapToken) -> BootstrapToken:
    """Fill a missing token id and secret, keeping caller-supplied values."""
    current = token.token or BootstrapTokenString()
    if current.id and current.secret:
        return token

    # id and secret are drawn independently
    enriched = BootstrapTokenString(
        id=current.id or random_string(TOKEN_ID_LENGTH),
        secret=current.secret or random_string(TOKEN_SECRET_LENGTH),
    )
    return replace(token, token=enriched, usages=list(token.usages), groups=list(token.groups))


def generate_token() -> str:
    """A fresh ``<id>.<secret>`` bootstrap token string."""
    return str(enrich_bootstrap_token(BootstrapToken()).token)
