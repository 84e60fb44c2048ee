"""Outcomes returned by the command dispatcher."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from patrol.commands.policy import CommandKind
    from patrol.errors import RejectionReason


@dc.dataclass(frozen=True, slots=True)
class Ignored:
    """No trigger or no verb: nothing to report."""

    status: typ.ClassVar[str] = "ignored"


@dc.dataclass(frozen=True, slots=True)
class Success:
    """Command executed; ``message`` is posted back to the conversation."""

    command: CommandKind
    message: str

    status: typ.ClassVar[str] = "success"


@dc.dataclass(frozen=True, slots=True)
class Rejected:
    """Command refused or failed without mutating state."""

    reason: RejectionReason
    message: str

    status: typ.ClassVar[str] = "rejected"


type Outcome = Ignored | Success | Rejected

IGNORED = Ignored()
