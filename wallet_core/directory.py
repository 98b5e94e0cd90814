"""
Account Directory Module

Entry point for all account and ledger operations. The directory owns its
store, runs every operation under one lock and reports every outcome as a
JSONResponse; modeled failures are never raised to the caller.
"""

import threading
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from .audit import AuditTrail
from .config import WalletConfig, get_config
from .errors import WalletError
from .logging_config import get_logger, log_action
from .responses import JSONResponse
from .storage import InMemoryStorage, StorageInterface
from .tokens import Numeric
from .transfers import TransferProcessor
from .users import User, UserManager


class AccountDirectory:
    """
    Process-local account directory.

    Each public operation executes as if under a single global lock: no
    caller observes a half-applied update and concurrent transfers on the
    same balance never lose an update.
    """

    def __init__(self, storage: Optional[StorageInterface] = None,
                 config: Optional[WalletConfig] = None):
        self.config = config or get_config()
        self.storage = storage or InMemoryStorage()
        self.audit_trail = AuditTrail(self.storage)

        audit = self.audit_trail if self.config.enable_audit_logging else None
        self.user_manager = UserManager(self.storage, self.config, audit)
        self.transfer_processor = TransferProcessor(self.user_manager, self.config, audit)

        self.logger = get_logger("wallet.directory")
        self._lock = threading.RLock()

    # Account operations

    def register(self, login: str, password: str, confirm_password: str) -> JSONResponse:
        """
        Create an account and sign it in.

        On success the response is the sign-in result, not a
        registration-specific message.
        """
        with self._lock:
            try:
                user = self.user_manager.register(login, password, confirm_password)
            except WalletError as e:
                return self._failure("register", e, login=login)
            self._log_success("register", login=login, uid=user.id)
            return self.authenticate(login, password)

    def authenticate(self, login: str, password: str) -> JSONResponse:
        with self._lock:
            return self._run("authenticate",
                             lambda: self.user_manager.authenticate(login, password),
                             login=login, message="login success")

    def verify(self, login: str, password: str, phone: str, age: int,
               card_number: str, geo: str) -> JSONResponse:
        with self._lock:
            return self._run("verify", lambda: self.user_manager.verify(
                login, password, phone, age, card_number, geo),
                login=login, message="verification success")

    def reset_password(self, phone: str, new_password: str) -> JSONResponse:
        with self._lock:
            return self._run("reset_password",
                             lambda: self.user_manager.reset_password(phone, new_password),
                             message="password reset success")

    def change_password(self, login: str, old_password: str, new_password: str) -> JSONResponse:
        with self._lock:
            return self._run("change_password", lambda: self.user_manager.change_password(
                login, old_password, new_password),
                login=login, message="Password changed successfully")

    def add_token(self, uid: str, token: str, initial_balance: Numeric) -> JSONResponse:
        with self._lock:
            return self._run("add_token", lambda: self.user_manager.add_token(
                uid, token, initial_balance),
                uid=uid, resource=f"token:{token}", message="Token added successfully")

    # Ledger operations

    def transfer(self, sender_uid: str, receiver_uid: str, amount: Numeric, token: str) -> JSONResponse:
        with self._lock:
            return self._run("transfer", lambda: self.transfer_processor.transfer(
                sender_uid, receiver_uid, amount, token),
                uid=sender_uid, resource=f"token:{token}", message="Transaction successful",
                extra={"receiver_uid": receiver_uid, "amount": str(amount)})

    def transfer_with_history(self, receiver_uid: str, sender_uid: str, amount: Numeric,
                              token: str) -> JSONResponse:
        """Transfer that records a history line for both parties; receiver comes first"""
        with self._lock:
            return self._run("transfer_with_history", lambda: self.transfer_processor.transfer_with_history(
                receiver_uid, sender_uid, amount, token),
                uid=sender_uid, resource=f"token:{token}",
                message="Transaction received and processed",
                extra={"receiver_uid": receiver_uid, "amount": str(amount)})

    # Queries

    def get_user(self, uid: str) -> Optional[User]:
        with self._lock:
            return self.user_manager.get_user(uid)

    def get_user_by_login(self, login: str) -> Optional[User]:
        with self._lock:
            return self.user_manager.get_user_by_login(login)

    def list_users(self) -> List[User]:
        with self._lock:
            return self.user_manager.list_users()

    def get_balance(self, uid: str, token: str) -> Optional[Decimal]:
        """Balance of token for uid; None when the user does not exist"""
        with self._lock:
            user = self.user_manager.get_user(uid)
            if not user:
                return None
            return user.get_balance(token)

    def get_transaction_history(self, uid: str) -> Optional[List[str]]:
        with self._lock:
            user = self.user_manager.get_user(uid)
            if not user:
                return None
            return list(user.transaction_history)

    def verify_integrity(self) -> Dict[str, Any]:
        with self._lock:
            return self.audit_trail.verify_integrity()

    def _run(self, action: str, operation: Callable[[], Any], message: str,
             login: Optional[str] = None, uid: Optional[str] = None,
             resource: Optional[str] = None, extra: Optional[dict] = None) -> JSONResponse:
        """Execute a manager call, turning a WalletError into its response"""
        try:
            operation()
        except WalletError as e:
            return self._failure(action, e, login=login, uid=uid, resource=resource, extra=extra)

        self._log_success(action, login=login, uid=uid, resource=resource, extra=extra)
        return JSONResponse.ok(message)

    def _failure(self, action: str, error: WalletError, login: Optional[str] = None,
                 uid: Optional[str] = None, resource: Optional[str] = None,
                 extra: Optional[dict] = None) -> JSONResponse:
        response = error.to_response()
        log_action(
            self.logger, "warning", f"{action} failed: {error.message}",
            login=login, uid=uid, action=action, resource=resource,
            extra=dict(extra or {}, status=response.status)
        )
        return response

    def _log_success(self, action: str, login: Optional[str] = None, uid: Optional[str] = None,
                     resource: Optional[str] = None, extra: Optional[dict] = None) -> None:
        log_action(
            self.logger, "info", f"{action} succeeded",
            login=login, uid=uid, action=action, resource=resource, extra=extra
        )
