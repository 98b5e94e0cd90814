"""
User Management Module

User records, credential checks, identity verification, password changes
and token balance sheets. Passwords are stored as given; this directory is
a simulation and performs no hashing.
"""

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from .audit import AuditEventType, AuditTrail
from .config import WalletConfig
from .errors import BadRequestError, ConflictError, NotFoundError, UnauthorizedError
from .storage import StorageInterface, StorageRecord
from .tokens import Numeric, balances_from_storage, seed_balances, to_amount


INVALID_CREDENTIALS = "Invalid login or password"
USER_NOT_FOUND = "User not found"


@dataclass
class User(StorageRecord):
    """
    Directory user with a multi-token balance sheet.

    The record id doubles as the user's uid.
    """
    login: str
    password: str
    online: bool = False
    verified: bool = False
    phone: Optional[str] = None
    age: Optional[int] = None
    card_number: Optional[str] = None
    geo: Optional[str] = None
    balance: Dict[str, Decimal] = field(default_factory=dict)
    transaction_history: List[str] = field(default_factory=list)

    @property
    def uid(self) -> str:
        return self.id

    def get_balance(self, token: str) -> Decimal:
        """Balance for token, zero when the user does not hold it"""
        return self.balance.get(token, Decimal('0'))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'User':
        data = dict(data)
        data['balance'] = balances_from_storage(data.get('balance'))
        data['transaction_history'] = list(data.get('transaction_history') or [])
        return super().from_dict(data)


class UserManager:
    """
    Manages the user lifecycle: registration, sign-in, verification,
    password recovery and token balances.

    Users are stored by uid; a login -> uid index is kept alongside and
    updated on every insert. Users are never deleted.
    """

    def __init__(self, storage: StorageInterface, config: WalletConfig,
                 audit_trail: Optional[AuditTrail] = None):
        self.storage = storage
        self.config = config
        self.audit = audit_trail
        self.table_name = "users"
        self._login_pattern = re.compile(config.login_pattern)
        self._uid_by_login: Dict[str, str] = {
            data['login']: data['id'] for data in storage.load_all(self.table_name)
        }

    # Validation

    def validate_login(self, login: str) -> bool:
        return isinstance(login, str) and self._login_pattern.fullmatch(login) is not None

    def validate_password(self, password: str) -> bool:
        return isinstance(password, str) and len(password) >= self.config.password_min_length

    # Lookups

    def get_user(self, uid: str) -> Optional[User]:
        """Get user by uid"""
        data = self.storage.load(self.table_name, uid)
        if data:
            return User.from_dict(data)
        return None

    def get_user_by_login(self, login: str) -> Optional[User]:
        if not isinstance(login, str):
            return None
        uid = self._uid_by_login.get(login)
        if uid is None:
            return None
        return self.get_user(uid)

    def get_user_by_phone(self, phone: str) -> Optional[User]:
        """Earliest registered user with this phone number"""
        if phone is None:
            return None
        data = self.storage.find_first(self.table_name, {'phone': phone})
        if data:
            return User.from_dict(data)
        return None

    def list_users(self) -> List[User]:
        """All users in registration order"""
        return [User.from_dict(data) for data in self.storage.load_all(self.table_name)]

    def save_user(self, user: User) -> None:
        user.updated_at = datetime.now(timezone.utc)
        self.storage.save(self.table_name, user.id, user.to_dict())

    # Lifecycle

    def register(self, login: str, password: str, confirm_password: str) -> User:
        """
        Create a new user with zero balances for the default tokens

        Raises:
            BadRequestError: passwords differ, or login/password fail validation
            ConflictError: login already taken
        """
        if password != confirm_password:
            raise BadRequestError("Passwords do not match")
        if not self.validate_login(login) or not self.validate_password(password):
            raise BadRequestError(INVALID_CREDENTIALS)
        if login in self._uid_by_login:
            raise ConflictError("Login already taken")

        uid = str(uuid.uuid4())
        while self.storage.exists(self.table_name, uid):
            uid = str(uuid.uuid4())

        now = datetime.now(timezone.utc)
        user = User(
            id=uid,
            created_at=now,
            updated_at=now,
            login=login,
            password=password,
            balance=seed_balances(self.config.default_tokens)
        )

        self.storage.save(self.table_name, user.id, user.to_dict())
        self._uid_by_login[login] = uid

        if self.audit:
            self.audit.log_event(
                AuditEventType.USER_REGISTERED,
                'user',
                uid,
                {'login': login, 'tokens': list(user.balance)},
                uid
            )

        return user

    def authenticate(self, login: str, password: str) -> User:
        """Check credentials and mark the user online"""
        user = self._check_credentials(login, password)

        user.online = True
        self.save_user(user)

        if self.audit:
            self.audit.log_event(AuditEventType.LOGIN_SUCCESS, 'user', user.id,
                                 {'login': login}, user.id)

        return user

    def verify(self, login: str, password: str, phone: str, age: int,
               card_number: str, geo: str) -> User:
        """
        Attach identity details and mark the user verified.

        Works whether or not the user is online. Fields are written only
        after the credential check passes and are not format-checked.
        """
        user = self._check_credentials(login, password)

        user.phone = phone
        user.age = age
        user.card_number = card_number
        user.geo = geo
        user.verified = True
        self.save_user(user)

        if self.audit:
            self.audit.log_event(AuditEventType.USER_VERIFIED, 'user', user.id,
                                 {'login': login}, user.id)

        return user

    def reset_password(self, phone: str, new_password: str) -> User:
        """Overwrite the password of the first user registered with phone"""
        user = self.get_user_by_phone(phone)
        if not user:
            raise NotFoundError(USER_NOT_FOUND)

        user.password = new_password
        self.save_user(user)

        if self.audit:
            self.audit.log_event(AuditEventType.PASSWORD_RESET, 'user', user.id,
                                 {'login': user.login, 'method': 'phone'})

        return user

    def change_password(self, login: str, old_password: str, new_password: str) -> User:
        user = self._check_credentials(login, old_password)

        user.password = new_password
        self.save_user(user)

        if self.audit:
            self.audit.log_event(AuditEventType.PASSWORD_CHANGED, 'user', user.id,
                                 {'login': login}, user.id)

        return user

    def add_token(self, uid: str, token: str, initial_balance: Numeric) -> User:
        """
        Open a token position for a user.

        A token whose balance is zero counts as absent and may be added
        again, unless strict_token_check is enabled.
        """
        user = self.get_user(uid)
        if not user:
            raise NotFoundError(USER_NOT_FOUND)

        if self.config.strict_token_check:
            exists = token in user.balance
        else:
            exists = bool(user.balance.get(token))
        if exists:
            raise ConflictError("Token already exists for user")

        try:
            amount = to_amount(initial_balance)
        except ValueError:
            raise BadRequestError("Invalid amount")

        user.balance[token] = amount
        self.save_user(user)

        if self.audit:
            self.audit.log_event(AuditEventType.TOKEN_ADDED, 'user', user.id,
                                 {'token': token, 'initial_balance': amount}, user.id)

        return user

    def _check_credentials(self, login: str, password: str) -> User:
        user = self.get_user_by_login(login)
        if not user or user.password != password:
            if self.audit:
                self.audit.log_event(
                    AuditEventType.LOGIN_FAILED,
                    'user',
                    user.id if user else str(login),
                    {'login': login, 'reason': 'invalid_password' if user else 'user_not_found'}
                )
            raise UnauthorizedError(INVALID_CREDENTIALS)
        return user
