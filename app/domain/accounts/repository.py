"""Account repository - Database operations for accounts"""

from sqlalchemy.orm import Session

from ...models import Account


class AccountRepository:
    """Repository for account database operations"""

    @staticmethod
    def update_account(db: Session, account: Account, **updates) -> Account:
        """Write the given columns, None included"""
        for key, value in updates.items():
            setattr(account, key, value)

        db.commit()
        db.refresh(account)
        return account
