"""
Status transition rules for proposals, contracts and invoices.

Each document type is a table of (current status, action) -> next status.
Services consult the table before touching the database; anything not in
the table is refused.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class InvalidTransition(ValueError):
    """Raised when an action is not allowed from the document's current status"""

    def __init__(self, document: str, status: str, action: str):
        self.document = document
        self.status = status
        self.action = action
        super().__init__(f"Cannot {action} a {document} with status '{status}'")


class StateMachine:
    def __init__(self, document: str, transitions: dict[tuple[str, str], str], terminal: set[str]):
        self.document = document
        self.transitions = transitions
        self.terminal = frozenset(terminal)
        self.states = frozenset({s for s, _ in transitions} | set(transitions.values()))

    def can(self, status: str, action: str) -> bool:
        return (status, action) in self.transitions

    def next_state(self, status: str, action: str) -> str:
        """Return the status reached by applying ``action``, or raise InvalidTransition"""
        try:
            target = self.transitions[(status, action)]
        except KeyError:
            raise InvalidTransition(self.document, status, action) from None
        logger.debug(f"{self.document}: {status} --{action}--> {target}")
        return target

    def action_for(self, status: str, target: str) -> Optional[str]:
        """Find the action that moves ``status`` to ``target``, if any"""
        for (source, action), destination in self.transitions.items():
            if source == status and destination == target:
                return action
        return None

    def actions(self, status: str) -> list[str]:
        return [action for (source, action) in self.transitions if source == status]


PROPOSAL_WORKFLOW = StateMachine(
    "proposal",
    {
        ("draft", "send"): "sent",
        ("sent", "mark_viewed"): "viewed",
        ("viewed", "mark_viewed"): "viewed",
        ("viewed", "accept"): "accepted",
        ("viewed", "reject"): "rejected",
    },
    terminal={"accepted", "rejected"},
)

CONTRACT_WORKFLOW = StateMachine(
    "contract",
    {
        ("draft", "send"): "sent",
        ("sent", "mark_viewed"): "viewed",
        ("sent", "sign"): "signed",
        ("viewed", "sign"): "signed",
        ("signed", "countersign"): "completed",
        ("draft", "cancel"): "cancelled",
        ("sent", "cancel"): "cancelled",
        ("viewed", "cancel"): "cancelled",
        ("signed", "cancel"): "cancelled",
    },
    terminal={"countersigned", "completed", "cancelled"},
)

INVOICE_WORKFLOW = StateMachine(
    "invoice",
    {
        ("draft", "send"): "sent",
        ("sent", "mark_viewed"): "viewed",
        ("sent", "mark_overdue"): "overdue",
        ("viewed", "mark_overdue"): "overdue",
        ("sent", "mark_paid"): "paid",
        ("viewed", "mark_paid"): "paid",
        ("overdue", "mark_paid"): "paid",
        ("draft", "cancel"): "cancelled",
        ("sent", "cancel"): "cancelled",
        ("viewed", "cancel"): "cancelled",
        ("overdue", "cancel"): "cancelled",
    },
    terminal={"paid", "cancelled"},
)
