"""
Transfer Processing Module

Peer-to-peer token transfers between directory users. A transfer is a
pre-checked debit of the sender followed by a credit of the receiver; the
two writes are not atomic on their own, callers serialize them.
"""

import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple

from .audit import AuditEventType, AuditTrail
from .config import WalletConfig
from .errors import BadRequestError, NotFoundError
from .tokens import ZERO, Numeric, format_amount, to_amount
from .users import USER_NOT_FOUND, User, UserManager


INSUFFICIENT_BALANCE = "Insufficient balance"


@dataclass(frozen=True)
class TransferResult:
    """Outcome of a completed transfer"""
    transfer_id: str
    sender: User
    receiver: User
    amount: Decimal
    token: str
    description: Optional[str] = None


def describe_transfer(sender_login: str, amount: Decimal, token: str, receiver_login: str) -> str:
    """History line shared by both parties of a recorded transfer"""
    return f"{sender_login} sent {format_amount(amount)} {token} to {receiver_login}"


class TransferProcessor:
    """Moves token balances between users"""

    def __init__(self, user_manager: UserManager, config: WalletConfig,
                 audit_trail: Optional[AuditTrail] = None):
        self.user_manager = user_manager
        self.config = config
        self.audit = audit_trail

    def transfer(self, sender_uid: str, receiver_uid: str, amount: Numeric, token: str) -> TransferResult:
        """
        Move amount of token from sender to receiver without recording history

        Raises:
            NotFoundError: either uid is unknown
            BadRequestError: invalid amount or sender holds less than amount
        """
        sender, receiver = self._resolve(sender_uid, receiver_uid)
        value = self._parse_amount(amount)

        if not self._has_funds(sender, token, value):
            self._log_failure(sender, receiver, value, token)
            raise BadRequestError(INSUFFICIENT_BALANCE)

        return self._apply(sender, receiver, value, token, record_history=False)

    def transfer_with_history(self, receiver_uid: str, sender_uid: str, amount: Numeric,
                              token: str) -> TransferResult:
        """
        Move amount of token from sender to receiver and append the same
        history line to both users.

        Note the receiver-first argument order. Unless gate_receiver_balance
        is disabled, the receiver must also hold at least amount of token.
        """
        sender, receiver = self._resolve(sender_uid, receiver_uid)
        value = self._parse_amount(amount)

        funded = self._has_funds(sender, token, value)
        if funded and self.config.gate_receiver_balance:
            funded = self._has_funds(receiver, token, value)
        if not funded:
            self._log_failure(sender, receiver, value, token)
            raise BadRequestError(INSUFFICIENT_BALANCE)

        return self._apply(sender, receiver, value, token, record_history=True)

    def _resolve(self, sender_uid: str, receiver_uid: str) -> Tuple[User, User]:
        sender = self.user_manager.get_user(sender_uid)
        if sender and receiver_uid == sender_uid:
            receiver = sender
        else:
            receiver = self.user_manager.get_user(receiver_uid)
        if not sender or not receiver:
            raise NotFoundError(USER_NOT_FOUND)
        return sender, receiver

    @staticmethod
    def _parse_amount(amount: Numeric) -> Decimal:
        try:
            value = to_amount(amount)
        except ValueError:
            raise BadRequestError("Invalid amount")
        if value < ZERO:
            raise BadRequestError("Invalid amount")
        return value

    def _has_funds(self, user: User, token: str, amount: Decimal) -> bool:
        held = user.balance.get(token)
        if held is None:
            if not self.config.missing_token_as_zero:
                return True
            held = ZERO
        return held >= amount

    def _apply(self, sender: User, receiver: User, amount: Decimal, token: str,
               record_history: bool) -> TransferResult:
        sender.balance[token] = sender.get_balance(token) - amount
        receiver.balance[token] = receiver.get_balance(token) + amount

        description = None
        if record_history:
            description = describe_transfer(sender.login, amount, token, receiver.login)
            sender.transaction_history.append(description)
            receiver.transaction_history.append(description)

        self.user_manager.save_user(sender)
        if receiver is not sender:
            self.user_manager.save_user(receiver)

        transfer_id = str(uuid.uuid4())
        if self.audit:
            self.audit.log_event(
                AuditEventType.TRANSFER_COMPLETED,
                'transfer',
                transfer_id,
                {
                    'sender_uid': sender.id,
                    'receiver_uid': receiver.id,
                    'amount': amount,
                    'token': token,
                    'recorded': record_history
                },
                sender.id
            )

        return TransferResult(
            transfer_id=transfer_id,
            sender=sender,
            receiver=receiver,
            amount=amount,
            token=token,
            description=description
        )

    def _log_failure(self, sender: User, receiver: User, amount: Decimal, token: str) -> None:
        if self.audit:
            self.audit.log_event(
                AuditEventType.TRANSFER_FAILED,
                'user',
                sender.id,
                {
                    'receiver_uid': receiver.id,
                    'amount': amount,
                    'token': token,
                    'reason': 'insufficient_balance'
                },
                sender.id
            )
