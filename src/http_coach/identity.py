"""Anonymous client identity carried in a ``client_id`` cookie.

The identity is an opaque random token used only to key history storage.
It is reused verbatim when the caller presents one; otherwise a new UUID is
minted and the response must carry a ``Set-Cookie`` directive so the caller
keeps it.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Dict, Optional

COOKIE_NAME = "client_id"
# One year, in seconds.
COOKIE_MAX_AGE = 31536000


def parse_cookies(raw: Optional[str]) -> Dict[str, str]:
    """Parse a ``Cookie`` header into a name → value mapping.

    Entries are split on ``;`` and then on ``=``.  Only entries that split
    into exactly two tokens are kept, so a value that itself contains ``=``
    is dropped, as is an entry with no ``=`` at all.
    """
    cookies: Dict[str, str] = {}
    if not raw:
        return cookies
    for entry in raw.split(";"):
        parts = entry.split("=")
        if len(parts) == 2:
            cookies[parts[0].strip()] = parts[1].strip()
    return cookies


def build_set_cookie(client_id: str, max_age: int = COOKIE_MAX_AGE) -> str:
    """Return the ``Set-Cookie`` value that persists *client_id* site-wide."""
    return (
        f"{COOKIE_NAME}={client_id}; Path=/; HttpOnly; SameSite=Strict; "
        f"Max-Age={max_age}"
    )


@dataclass(frozen=True)
class ClientIdentity:
    """A resolved client identity.

    Parameters
    ----------
    client_id : str
        The opaque identifier used as the history key suffix.
    is_new : bool
        *True* when the identifier was minted for this request.
    """

    client_id: str
    is_new: bool = False

    @property
    def set_cookie(self) -> Optional[str]:
        """The ``Set-Cookie`` directive to send, or *None* if not needed."""
        if not self.is_new:
            return None
        return build_set_cookie(self.client_id)


def resolve_client_identity(
    cookies: Dict[str, str], mint: bool = True
) -> Optional[ClientIdentity]:
    """Reuse the ``client_id`` cookie or mint a fresh identity.

    Any non-empty cookie value is accepted as-is.  With ``mint=False`` an
    absent cookie resolves to *None* instead of a new identity.
    """
    client_id = cookies.get(COOKIE_NAME)
    if client_id:
        return ClientIdentity(client_id=client_id)
    if not mint:
        return None
    return ClientIdentity(client_id=str(uuid.uuid4()), is_new=True)
