import uuid
from datetime import date

import pytest
from sqlalchemy import select

from streamhub.core.exceptions import ActiveSubscriptionExists, InvalidStateTransition, NotFound, ValidationError
from streamhub.modules.audit.models import AuditAction, SystemAuditLog
from streamhub.modules.plans import schemas as plan_schemas
from streamhub.modules.plans import service as plans_service
from streamhub.modules.subscriptions import schemas, service
from streamhub.modules.subscriptions.models import SubscriptionStatus
from streamhub.modules.users import schemas as user_schemas
from streamhub.modules.users import service as users_service
from streamhub.modules.users.models import UserStatus


async def test_create_computes_end_date_from_plan(make_user, make_plan, make_subscription):
    user = await make_user()
    plan = await make_plan(duration_days=30)

    sub = await make_subscription(user, plan, start_date=date(2026, 3, 1))

    assert sub.status == SubscriptionStatus.ACTIVE
    assert sub.start_date == date(2026, 3, 1)
    assert sub.end_date == date(2026, 3, 31)
    assert sub.version_id == 1


async def test_one_live_subscription_per_user(make_user, make_plan, make_subscription):
    user = await make_user()
    plan = await make_plan()
    await make_subscription(user, plan)

    with pytest.raises(ActiveSubscriptionExists):
        await make_subscription(user, plan)


async def test_lapsed_subscription_does_not_block_a_new_one(db, make_user, make_plan, make_subscription):
    user = await make_user()
    plan = await make_plan(duration_days=30)
    old = await make_subscription(user, plan, start_date=date(2026, 1, 1), today=date(2026, 1, 1))

    new = await make_subscription(user, plan, start_date=date(2026, 3, 1), today=date(2026, 3, 1))

    assert old.status == SubscriptionStatus.EXPIRED
    assert new.status == SubscriptionStatus.ACTIVE


async def test_inactive_user_cannot_subscribe(db, make_user, make_plan, make_subscription):
    user = await make_user(status=UserStatus.SUSPENDED)
    plan = await make_plan()

    with pytest.raises(ValidationError):
        await make_subscription(user, plan)


async def test_retired_plan_cannot_be_bought(db, make_user, make_plan, make_subscription):
    user = await make_user()
    plan = await make_plan()
    await plans_service.set_plan_active(db, plan.id, plan_schemas.PlanActiveUpdate(is_active=False))

    with pytest.raises(ValidationError):
        await make_subscription(user, plan)


async def test_unknown_user_or_plan(db, make_user, make_plan):
    user = await make_user()
    plan = await make_plan()

    with pytest.raises(NotFound):
        await service.create_subscription(db, schemas.SubscriptionCreate(user_id=uuid.uuid4(), plan_id=plan.id))
    with pytest.raises(NotFound):
        await service.create_subscription(db, schemas.SubscriptionCreate(user_id=user.id, plan_id=uuid.uuid4()))


async def test_cancel_is_terminal(db, make_user, make_plan, make_subscription):
    user = await make_user()
    plan = await make_plan()
    sub = await make_subscription(user, plan)

    cancelled = await service.cancel_subscription(
        db, sub.id, schemas.SubscriptionCancel(performed_by="support", reason="requested")
    )
    assert cancelled.status == SubscriptionStatus.CANCELLED
    assert cancelled.version_id == 2

    with pytest.raises(InvalidStateTransition):
        await service.cancel_subscription(db, sub.id, schemas.SubscriptionCancel())

    # A cancelled subscription frees the user for a new one
    again = await make_subscription(user, plan)
    assert again.status == SubscriptionStatus.ACTIVE


async def test_expiry_sweep(db, make_user, make_plan, make_subscription):
    plan = await make_plan(duration_days=30)
    early = await make_subscription(await make_user("early"), plan, start_date=date(2026, 1, 1))
    late = await make_subscription(await make_user("late"), plan, start_date=date(2026, 2, 1))

    # end_date itself is still covered
    result = await service.expire_due_subscriptions(db, today=date(2026, 1, 31))
    assert result.expired_count == 0

    result = await service.expire_due_subscriptions(db, today=date(2026, 2, 1))
    assert result.expired_ids == [early.id]
    assert early.status == SubscriptionStatus.EXPIRED
    assert late.status == SubscriptionStatus.ACTIVE

    logs = (await db.execute(
        select(SystemAuditLog).where(
            SystemAuditLog.record_id == str(early.id),
            SystemAuditLog.action == AuditAction.STATUS_CHANGE,
        )
    )).scalars().all()
    assert len(logs) == 1
    assert logs[0].old_value == {"status": "ACTIVE"}
    assert logs[0].new_value["status"] == "EXPIRED"
    assert logs[0].performed_by == "system"


async def test_expire_if_due_only_touches_active(db, make_user, make_plan, make_subscription):
    user = await make_user()
    plan = await make_plan(duration_days=10)
    sub = await make_subscription(user, plan, start_date=date(2026, 1, 1))
    await service.cancel_subscription(db, sub.id, schemas.SubscriptionCancel())

    assert service.expire_if_due(db, sub, today=date(2027, 1, 1)) is False
    assert sub.status == SubscriptionStatus.CANCELLED


async def test_list_subscriptions_filters(db, make_user, make_plan, make_subscription):
    plan = await make_plan()
    alice = await make_user("alice")
    bob = await make_user("bob")
    sub = await make_subscription(alice, plan)
    await make_subscription(bob, plan)
    await service.cancel_subscription(db, sub.id, schemas.SubscriptionCancel())

    assert [s.id for s in await service.list_subscriptions(db, user_id=alice.id)] == [sub.id]
    active = await service.list_subscriptions(db, status=SubscriptionStatus.ACTIVE)
    assert [s.user_id for s in active] == [bob.id]


async def test_deleted_user_status_is_terminal(db, make_user):
    user = await make_user()
    await users_service.update_user_status(db, user.id, user_schemas.UserStatusUpdate(status=UserStatus.DELETED))

    with pytest.raises(InvalidStateTransition):
        await users_service.update_user_status(db, user.id, user_schemas.UserStatusUpdate(status=UserStatus.ACTIVE))
