"""
Credential guard.

Reads and overrides the paper/live flag on a credential bundle. The
caller's bundle is never mutated: an override is always a new value, so
the original stays usable for logging and inspection.
"""

from typing import Any, Mapping, Optional, Union

from tradegate.models.trading import CredentialEnvironment, Credentials


CredentialsLike = Union[Credentials, Mapping[str, Any]]


def force_paper_trading_credentials(credentials: CredentialsLike) -> CredentialsLike:
    """
    Return a copy of the credentials pointed at the paper environment.

    Args:
        credentials: Credentials model or plain mapping

    Returns:
        New Credentials (or dict) with environment=paper and every other
        field equal to the original
    """
    if isinstance(credentials, Credentials):
        return credentials.model_copy(
            update={"environment": CredentialEnvironment.PAPER},
            deep=True,
        )
    overridden = dict(credentials)
    overridden["environment"] = CredentialEnvironment.PAPER.value
    return overridden


def is_paper_trading(credentials: Optional[CredentialsLike]) -> bool:
    """Check if credentials point at the paper environment."""
    if credentials is None:
        return False
    if isinstance(credentials, Credentials):
        return credentials.environment == CredentialEnvironment.PAPER
    return credentials.get("environment") == CredentialEnvironment.PAPER.value


def credential_environment(credentials: Optional[CredentialsLike]) -> CredentialEnvironment:
    """Environment recorded in the ledger: paper if paper, otherwise live."""
    if is_paper_trading(credentials):
        return CredentialEnvironment.PAPER
    return CredentialEnvironment.LIVE
