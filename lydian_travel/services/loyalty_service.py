import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lydian_travel.models.booking import Booking
from lydian_travel.models.loyalty import MilesAccount, MilesTransaction
from lydian_travel.models.user import User
from lydian_travel.repository import loyalty_repository
from lydian_travel.services import loyalty_rules
from lydian_travel.services.booking_utils import utcnow

logger = logging.getLogger(__name__)

TRANSACTION_EARN = "earn"
TRANSACTION_REDEEM = "redeem"
TRANSACTION_REFERRAL = "referral"
TRANSACTION_REFERRAL_WELCOME = "referral_welcome"


class LoyaltyService:
    def __init__(self, db: Session):
        self.db = db

    def _commit(self, message: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=message,
            ) from exc

    def _new_referral_code(self) -> str:
        for _ in range(10):
            code = loyalty_rules.generate_referral_code()
            if not loyalty_repository.referral_code_exists(self.db, code):
                return code
        raise RuntimeError("Could not generate a unique referral code")

    def get_or_create_account(self, user_id: int) -> MilesAccount:
        account = loyalty_repository.get_account_by_user(self.db, user_id)
        if account is not None:
            return account

        account = MilesAccount(
            id_user=user_id,
            available_miles=0,
            used_miles=0,
            lifetime_earned=0,
            lifetime_spent=0,
            tier="standard",
            referral_code=self._new_referral_code(),
        )
        return loyalty_repository.create_account(self.db, account)

    def get_summary(self, user: User, *, now: Optional[datetime] = None) -> Dict[str, Any]:
        account = self.get_or_create_account(user.id_user)
        self._commit("Could not load miles account")

        progress = loyalty_rules.calculate_tier_progress(account.lifetime_earned)
        earned = [
            (entry.amount, entry.expiry_date)
            for entry in loyalty_repository.list_transactions(self.db, account.id_account)
            if entry.type == TRANSACTION_EARN
        ]
        expiring_amount, expiring_date = loyalty_rules.expiring_miles(earned, now=now)

        return {
            "available_miles": account.available_miles,
            "used_miles": account.used_miles,
            "lifetime_earned": account.lifetime_earned,
            "lifetime_spent": account.lifetime_spent,
            "tier": account.tier,
            "tier_name": progress.current_tier.name,
            "referral_code": account.referral_code,
            "miles_value": loyalty_rules.calculate_miles_value(account.available_miles),
            "formatted_miles": loyalty_rules.format_miles(account.available_miles),
            "expiring_miles": expiring_amount,
            "expiring_date": expiring_date,
        }

    def list_transactions(self, user: User) -> List[MilesTransaction]:
        account = self.get_or_create_account(user.id_user)
        self._commit("Could not load miles account")
        return loyalty_repository.list_transactions(self.db, account.id_account)

    def get_tier_progress(self, user: User) -> Dict[str, Any]:
        account = self.get_or_create_account(user.id_user)
        self._commit("Could not load miles account")
        progress = loyalty_rules.calculate_tier_progress(account.lifetime_earned)
        return {
            "current_tier": progress.current_tier,
            "next_tier": progress.next_tier,
            "progress": progress.progress,
            "miles_needed": progress.miles_needed,
        }

    def award_booking(
        self,
        booking: Booking,
        *,
        now: Optional[datetime] = None,
    ) -> Optional[MilesTransaction]:
        """Credit miles for a completed booking; the caller owns the commit."""
        account = self.get_or_create_account(booking.id_user)
        if loyalty_repository.booking_already_rewarded(self.db, account.id_account, booking.id_booking):
            logger.info("Booking %s already rewarded, skipping", booking.booking_reference)
            return None

        is_first = not any(
            entry.type == TRANSACTION_EARN
            for entry in loyalty_repository.list_transactions(self.db, account.id_account)
        )
        earned = loyalty_rules.calculate_miles_earned(booking.total_amount, account.tier, is_first)
        if earned.total_miles <= 0:
            return None

        earned_at = now or utcnow()
        account.available_miles += earned.total_miles
        account.lifetime_earned += earned.total_miles

        description = f"{booking.booking_reference} rezervasyonu: +{earned.base_miles} Miles"
        if earned.bonus_reasons:
            description = "; ".join([description, *earned.bonus_reasons])

        transaction = MilesTransaction(
            id_account=account.id_account,
            id_booking=booking.id_booking,
            type=TRANSACTION_EARN,
            amount=earned.total_miles,
            balance_after=account.available_miles,
            description=description,
            expiry_date=loyalty_rules.calculate_miles_expiry(earned_at, account.tier),
        )
        loyalty_repository.add_transaction(self.db, transaction)

        new_tier = loyalty_rules.calculate_tier(account.lifetime_earned).tier
        if new_tier != account.tier:
            logger.info("Miles account %s promoted from %s to %s", account.id_account, account.tier, new_tier)
            account.tier = new_tier

        self.db.flush()
        return transaction

    def _credit(
        self,
        account: MilesAccount,
        miles: int,
        kind: str,
        description: str,
        earned_at: datetime,
    ) -> MilesTransaction:
        account.available_miles += miles
        account.lifetime_earned += miles
        transaction = loyalty_repository.add_transaction(
            self.db,
            MilesTransaction(
                id_account=account.id_account,
                type=kind,
                amount=miles,
                balance_after=account.available_miles,
                description=description,
                expiry_date=loyalty_rules.calculate_miles_expiry(earned_at, account.tier),
            ),
        )
        account.tier = loyalty_rules.calculate_tier(account.lifetime_earned).tier
        return transaction

    def apply_referral(self, user: User, referral_code: str, *, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Credit both sides of a referral once the referred user enters a friend's code.

        The referred user's largest completed booking decides whether the
        high-value extra applies.
        """
        referrer = loyalty_repository.get_account_by_referral_code(self.db, referral_code.strip().upper())
        if referrer is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invalid referral code")
        if referrer.id_user == user.id_user:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You cannot use your own referral code",
            )

        account = self.get_or_create_account(user.id_user)
        if loyalty_repository.referral_already_applied(self.db, account.id_account):
            self.db.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Referral already applied")

        booking_amount = loyalty_repository.highest_completed_booking_total(self.db, user.id_user)
        referrer_bonus, referred_bonus = loyalty_rules.calculate_referral_bonus(referrer.tier, float(booking_amount))
        earned_at = now or utcnow()
        self._credit(
            referrer,
            referrer_bonus,
            TRANSACTION_REFERRAL,
            f"Arkadaş daveti: +{loyalty_rules.format_miles(referrer_bonus)}",
            earned_at,
        )
        self._credit(
            account,
            referred_bonus,
            TRANSACTION_REFERRAL_WELCOME,
            f"Davet hoş geldin bonusu: +{loyalty_rules.format_miles(referred_bonus)}",
            earned_at,
        )
        self._commit("Could not apply referral")
        logger.info("Referral %s applied for user %s", referral_code, user.id_user)

        return {
            "referrer_bonus": referrer_bonus,
            "referred_bonus": referred_bonus,
            "available_miles": account.available_miles,
        }

    def redeem(self, user: User, miles: int) -> Dict[str, Any]:
        account = self.get_or_create_account(user.id_user)
        error = loyalty_rules.validate_miles_redemption(account.available_miles, miles)
        if error is not None:
            self.db.rollback()
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

        value = loyalty_rules.calculate_miles_value(miles)
        account.available_miles -= miles
        account.used_miles += miles
        account.lifetime_spent += miles
        loyalty_repository.add_transaction(
            self.db,
            MilesTransaction(
                id_account=account.id_account,
                type=TRANSACTION_REDEEM,
                amount=-miles,
                balance_after=account.available_miles,
                description=f"{loyalty_rules.format_miles(miles)} kullanıldı: ₺{value}",
            ),
        )
        self._commit("Could not redeem miles")

        return {
            "miles_redeemed": miles,
            "discount_value": value,
            "available_miles": account.available_miles,
        }
