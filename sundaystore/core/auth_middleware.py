"""
Actor resolution

Authentication happens upstream (API gateway / identity provider). The gateway
forwards the authenticated user as ``X-Actor-Id`` and ``X-Actor-Role`` headers;
these dependencies turn them into an ``Actor`` and enforce role requirements.
"""

from typing import Optional

from fastapi import Depends, Header

from sundaystore.core.exceptions import AuthenticationError, AuthorizationError
from sundaystore.schemas.actor import Actor, ActorRole


def get_current_actor(
    x_actor_id: Optional[str] = Header(None),
    x_actor_role: Optional[str] = Header(None),
) -> Actor:
    """Required actor - both headers must be present and well formed"""
    if not x_actor_id or not x_actor_role:
        raise AuthenticationError("Actor headers are required")

    try:
        actor_id = int(x_actor_id)
    except ValueError:
        raise AuthenticationError(f"Invalid actor id: {x_actor_id}")

    try:
        role = ActorRole(x_actor_role.lower())
    except ValueError:
        raise AuthenticationError(f"Unknown actor role: {x_actor_role}")

    return Actor(id=actor_id, role=role)


def require_manager(actor: Actor = Depends(get_current_actor)) -> Actor:
    """Teachers and administrators"""
    if not actor.is_manager:
        raise AuthorizationError("Teacher or admin role required")
    return actor


def require_church_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    """Church admins and above (points configuration)"""
    if not actor.is_church_admin:
        raise AuthorizationError("Church admin role required")
    return actor


def ensure_student_access(actor: Actor, student_id: int) -> None:
    """Students may only touch their own wallet and orders"""
    if not actor.is_manager and actor.id != student_id:
        raise AuthorizationError("Students can only access their own records")
