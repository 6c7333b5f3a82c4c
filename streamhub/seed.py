import asyncio
import logging
from decimal import Decimal

from sqlalchemy import select

from streamhub.core.db import SessionLocal
from streamhub.core.timeutils import utcnow
from streamhub.modules.plans.models import SubscriptionPlan
from streamhub.modules.users.models import Role

logger = logging.getLogger(__name__)

DEFAULT_ROLES = {
    "ADMIN": "Full catalog and account management",
    "EDITOR": "Manages catalog content",
    "SUBSCRIBER": "Regular viewer account",
}

DEFAULT_PLANS = [
    {"plan_name": "Basic", "price": Decimal("7.99"), "duration_days": 30, "features": {"hd": False, "screens": 1}},
    {"plan_name": "Standard", "price": Decimal("12.99"), "duration_days": 30, "features": {"hd": True, "screens": 2}},
    {"plan_name": "Premium", "price": Decimal("17.99"), "duration_days": 30, "features": {"hd": True, "uhd": True, "screens": 4}},
]

async def seed_defaults():
    async with SessionLocal() as session:
        now = utcnow()

        result = await session.execute(select(Role.role_name))
        existing_roles = set(result.scalars().all())
        for name, description in DEFAULT_ROLES.items():
            if name in existing_roles:
                continue
            session.add(Role(role_name=name, description=description, created_at=now))
            logger.info(f"[Seed] Role {name} created")

        result = await session.execute(select(SubscriptionPlan.plan_name))
        existing_plans = set(result.scalars().all())
        for plan in DEFAULT_PLANS:
            if plan["plan_name"] in existing_plans:
                continue
            session.add(SubscriptionPlan(**plan, is_active=True, created_by="seed", created_at=now, updated_at=now))
            logger.info(f"[Seed] Plan {plan['plan_name']} created")

        await session.commit()
        logger.info("[Seed] Defaults in place.")

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed_defaults())
