# (c) Copyright Datacraft, 2026
"""
Current actor resolution.

Authentication happens upstream; the proxy forwards the actor id and role
in headers. The ledger only needs to know whether the actor is elevated.
"""
from dataclasses import dataclass, field
from typing import Annotated

from fastapi import Depends, Request

from caseledger.core.config import Settings, get_settings
from caseledger.core.exceptions import ForbiddenError, UnauthorizedError


@dataclass(frozen=True)
class Actor:
	id: str
	role: str | None = None
	elevated_roles: frozenset[str] = field(
		default=frozenset({"super_admin", "manager"}),
		repr=False,
	)

	@property
	def elevated(self) -> bool:
		return self.role in self.elevated_roles


def get_current_actor(
	request: Request,
	settings: Annotated[Settings, Depends(get_settings)],
) -> Actor:
	actor_id = request.headers.get(settings.remote_user_header)
	if not actor_id:
		raise UnauthorizedError()
	role = request.headers.get(settings.remote_roles_header)
	if role:
		# First role wins when the proxy forwards a list
		role = role.split(",")[0].strip()
	return Actor(
		id=actor_id,
		role=role or None,
		elevated_roles=frozenset(settings.elevated_roles),
	)


def require_elevated(actor: Actor) -> Actor:
	if not actor.elevated:
		raise ForbiddenError("Only administrators can perform this action")
	return actor


CurrentActor = Annotated[Actor, Depends(get_current_actor)]
