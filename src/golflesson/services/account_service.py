"""Account directory: customers, admins and their roles."""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from golflesson.config.utils import is_valid_email
from golflesson.exceptions import AuthError, PermissionDeniedError, StorageError, ValidationError, handle_errors
from golflesson.models.user import Account, Role
from golflesson.storage import repositories
from golflesson.storage.document_store import DocumentStore
from golflesson.utils.logging_utils import EnhancedLoggerMixin
from golflesson.utils.timezone_utils import utc_now


class AccountService(EnhancedLoggerMixin):
    """Role records looked up by account id."""

    def __init__(
        self,
        store: DocumentStore,
        admin_fallback_email: str = "",
        clock: Callable[[], datetime] = utc_now
    ):
        super().__init__()
        self.store = store
        self.accounts = repositories.accounts(store)
        self.admin_fallback_email = admin_fallback_email
        self.clock = clock
        self.set_log_context(service="accounts")

    def register(
        self,
        account_id: str,
        email: str,
        display_name: str,
        role: Role = Role.USER,
        phone: str | None = None
    ) -> Account:
        """Create an account or refresh the profile fields of an existing one.

        The role of an existing account is only changed through ``set_role``.
        """
        if not account_id:
            raise ValidationError("Account id is required", {"field": "id"})
        if not is_valid_email(email):
            raise ValidationError("Invalid email address", {"field": "email"})

        now = self.clock()
        with handle_errors(StorageError, "accounts", "register"):
            with self.store.transaction():
                existing = self.accounts.get(account_id)
                if existing:
                    account = replace(
                        existing,
                        email=email,
                        display_name=display_name or existing.display_name,
                        phone=phone if phone is not None else existing.phone,
                        updated_at=now,
                    )
                else:
                    account = Account(
                        id=account_id,
                        email=email,
                        display_name=display_name,
                        role=role,
                        phone=phone,
                        created_at=now,
                        updated_at=now,
                    )
                self.accounts.upsert(account)
        self.info("Registered account", account_id=account_id, role=account.role.value)
        return account

    def get(self, account_id: str) -> Account:
        return self.accounts.require(account_id)

    def require_admin(self, account_id: str | None) -> Account:
        """Resolve the acting account and check it has the admin role."""
        if not account_id:
            raise AuthError("Login required")
        account = self.get(account_id)
        if not account.is_admin:
            raise PermissionDeniedError(
                f"Account {account_id} is not an admin",
                {"account_id": account_id}
            )
        return account

    def set_role(self, account_id: str, role: Role) -> Account:
        with handle_errors(StorageError, "accounts", "set_role"):
            with self.store.transaction():
                account = replace(self.get(account_id), role=role, updated_at=self.clock())
                self.accounts.upsert(account)
        self.info("Changed account role", account_id=account_id, role=role.value)
        return account

    def list_customers(self) -> list[Account]:
        """Non-admin accounts, oldest first."""
        customers = self.accounts.list_by(role=Role.USER)
        return sorted(customers, key=lambda a: (a.created_at.timestamp() if a.created_at else 0.0, a.id))

    def list_admin_emails(self) -> list[str]:
        """Notification addresses of all admins.

        The configured fallback address is included as well, without
        duplicates and keeping the order of first appearance.
        """
        emails = [a.email for a in self.accounts.list_by(role=Role.ADMIN) if a.email]
        if self.admin_fallback_email:
            emails.append(self.admin_fallback_email)

        seen: set[str] = set()
        result = []
        for email in emails:
            key = email.strip().lower()
            if key not in seen:
                seen.add(key)
                result.append(email.strip())
        return result
