"""Account service - Business logic for the account profile"""

import logging

from sqlalchemy.orm import Session

from ...models import Account
from ...shared.exceptions import NotFoundError
from .repository import AccountRepository
from .schemas import ReturnAddressUpdate

logger = logging.getLogger(__name__)


class AccountService:
    """Service layer for account settings"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AccountRepository()

    def get_return_address(self, account: Account) -> Account:
        """The account, provided a complete return address is on file"""
        if not account.has_return_address:
            raise NotFoundError("No return address on file")
        return account

    def update_return_address(self, account: Account, data: ReturnAddressUpdate) -> Account:
        """Replace the return address used for every future order"""
        updates = {
            "return_street": data.street,
            "return_apartment": data.apartment,
            "return_city": data.city,
            "return_state": data.state,
            "return_zip": data.zip,
        }
        if data.fullName is not None:
            updates["full_name"] = data.fullName

        account = self.repo.update_account(self.db, account, **updates)
        logger.info(f"✅ Return address updated for account_id: {account.id}")
        return account
