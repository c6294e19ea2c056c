"""
Coin economy

The session wallet is the single coin balance. For a password session it is
mirrored onto the customer's record whenever it changes, and the login adopts
the customer's stored coins as the wallet. Social sessions keep a wallet of
their own. Each product's coin reward is collected once per session.
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)

CHECK_IN_REWARD = 200
CHECK_IN_COOLDOWN = timedelta(hours=24)
COINS_PER_CURRENCY_UNIT = 100


class Clock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class CheckInState(str, Enum):
    CLAIMABLE = "Claimable"
    COOLING_DOWN = "CoolingDown"


class CheckInStatus(BaseModel):
    state: CheckInState
    remaining_seconds: int = 0
    countdown: str = ""
    next_claim_at: Optional[datetime] = None


def format_countdown(seconds: int) -> str:
    h, rest = divmod(max(0, seconds), 3600)
    m, s = divmod(rest, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


def coins_to_currency(coins: int) -> float:
    return coins / COINS_PER_CURRENCY_UNIT


class CoinEconomy:
    def __init__(self, session, catalog, clock: Optional[Clock] = None):
        self.session = session
        self.catalog = catalog
        self.clock = clock or Clock()

    @property
    def balance(self) -> int:
        return self.session.coins

    def add_coins(self, amount: int) -> int:
        """Apply ``amount`` (negative for redemption); the balance never drops below zero."""
        self.session.set_coins(max(0, self.session.coins + int(amount)))
        self._sync_customer()
        return self.session.coins

    def adopt_customer_coins(self, customer) -> None:
        self.session.set_coins(customer.coins)

    def linked_customer(self):
        """The customer record behind a password session, None for guests and social sessions."""
        user = self.session.current_user
        if user is None or user.provider is not None:
            return None
        return self.catalog.find_customer_by_email(user.email)

    def _sync_customer(self) -> None:
        customer = self.linked_customer()
        if customer is not None and customer.coins != self.session.coins:
            self.catalog.customers.update(customer.id, coins=self.session.coins)

    # Redemption
    def redemption_cap(self) -> int:
        return sum((item.max_coin_deduction or 0) * item.quantity for item in self.session.cart)

    def usable_coins(self) -> int:
        return min(self.session.coins, self.redemption_cap())

    # Daily check-in
    def check_in_status(self) -> CheckInStatus:
        last = self.session.last_check_in
        if last is None:
            return CheckInStatus(state=CheckInState.CLAIMABLE)
        next_claim_at = last + CHECK_IN_COOLDOWN
        remaining = (next_claim_at - self.clock.now()).total_seconds()
        if remaining <= 0:
            return CheckInStatus(state=CheckInState.CLAIMABLE)
        seconds = int(remaining)
        return CheckInStatus(
            state=CheckInState.COOLING_DOWN,
            remaining_seconds=seconds,
            countdown=format_countdown(seconds),
            next_claim_at=next_claim_at,
        )

    def claim_check_in(self) -> bool:
        if not self.session.is_logged_in:
            self.session.request_login()
            return False
        if self.check_in_status().state is not CheckInState.CLAIMABLE:
            return False
        self.session.set_last_check_in(self.clock.now())
        self.add_coins(CHECK_IN_REWARD)
        logger.info("Daily check-in claimed, balance %s", self.session.coins)
        return True

    # Missions
    @property
    def missions(self):
        return list(self.session.missions)

    def complete_mission(self, mission_id: str) -> bool:
        """Grant a mission's reward once; repeats and unknown ids are no-ops."""
        missions = self.session.missions
        mission = next((m for m in missions if m.id == mission_id), None)
        if mission is None or mission.is_completed:
            return False
        done = mission.model_copy(update={"is_completed": True, "progress": mission.goal})
        self.session.set_missions([done if m.id == mission_id else m for m in missions])
        self.add_coins(mission.reward)
        return True

    def collect_product_reward(self, product_id: str) -> int:
        if not self.session.is_logged_in:
            self.session.request_login()
            return 0
        product = self.catalog.find_product(product_id)
        if product is None or product.status != "active" or not product.coin_reward:
            return 0
        if product_id in self.session.collected_rewards:
            return 0
        self.session.set_collected_rewards(self.session.collected_rewards + [product_id])
        self.add_coins(product.coin_reward)
        return product.coin_reward


class CheckInTicker:
    """Recomputes the check-in status every ``interval`` seconds until stopped."""

    def __init__(self, economy: CoinEconomy, callback: Callable[[CheckInStatus], None], interval: float = 1.0):
        self.economy = economy
        self.callback = callback
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while True:
            self.callback(self.economy.check_in_status())
            await asyncio.sleep(self.interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def __aenter__(self):
        self.start()
        return self

    async def __aexit__(self, *exc):
        await self.stop()
