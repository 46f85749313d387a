"""Access to the identity established by the upstream authentication layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from .errors import Unauthorized


@dataclass(frozen=True, slots=True)
class CurrentUser:
    """The authenticated caller of a request."""

    id: str

    @classmethod
    def from_headers(cls, headers: Mapping[str, str], header_name: str) -> "CurrentUser":
        """Return the user named by ``header_name`` or raise :class:`Unauthorized`."""

        user_id = (headers.get(header_name) or "").strip()
        if not user_id:
            raise Unauthorized()
        if len(user_id) > 64:
            raise Unauthorized("Invalid user identity.")
        return cls(id=user_id)
