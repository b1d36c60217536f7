"""
Blog API - Request Identity
===========================

What:  The per-request caller identity, modelled as a closed sum type:
       either Anonymous() or Identified(user_id, user).
Who:   Produced by the auth gate (blog_api.auth.dependencies), consumed by
       the visibility policy and the post service.

Callers branch with isinstance() or match/case; there is no nullable
"current user" field to forget to check.
"""

import uuid
from dataclasses import dataclass, field
from typing import Optional, Union

from blog_api.models.user import User


@dataclass(frozen=True)
class Anonymous:
    """No credential, or a credential that did not verify (optional routes)."""


@dataclass(frozen=True)
class Identified:
    """A verified token whose subject still exists."""

    user_id: uuid.UUID
    user: Optional[User] = field(default=None, compare=False, repr=False)

    def owns(self, author_id: uuid.UUID) -> bool:
        return self.user_id == author_id


AuthContext = Union[Anonymous, Identified]

ANONYMOUS = Anonymous()
