"""Shared enums for models."""

from enum import Enum


class UserRole(str, Enum):
    """Account role within its tenant."""

    USER = "user"
    ADMIN = "admin"


class MqttAccess(str, Enum):
    """Broker action being authorized by an ACL check."""

    PUBLISH = "publish"
    SUBSCRIBE = "subscribe"


class MqttDecision(str, Enum):
    """Answer returned to the broker's HTTP auth hook.

    IGNORE means "no opinion" and lets the next backend in the broker's
    chain decide; it is not a softer DENY.
    """

    ALLOW = "allow"
    DENY = "deny"
    IGNORE = "ignore"
