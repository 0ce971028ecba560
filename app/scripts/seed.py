"""Development data seeder: one organization with a spread of searchable
records, calendar tasks and a do-not-disturb preference.

Run with ``python -m app.scripts.seed``; the printed ids go into the
``X-Organization-Id`` / ``X-User-Id`` headers.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy import func, select, text

from app.core.config import settings
from app.models import (
    Base,
    Customer,
    Lead,
    Notification,
    NotificationPreference,
    Opportunity,
    Order,
    Organization,
    Product,
    Quote,
    SupportCase,
    Task,
    Vendor,
)

DEMO_ORG_ID = UUID("00000000-0000-4000-8000-000000000001")
DEMO_USER_ID = UUID("00000000-0000-4000-8000-0000000000aa")
OTHER_USER_ID = UUID("00000000-0000-4000-8000-0000000000bb")
DEMO_TIMEZONE = "America/Los_Angeles"

COMPANIES = ["Acme Corp", "Globex", "Initech", "Umbrella Supply", "Stark Industries"]
LEAD_STATUSES = ["new", "contacted", "qualified", "lost"]
CASE_STATUSES = ["new", "in_progress", "resolved"]
STAGES = ["prospecting", "proposal", "negotiation", "closed_won"]
QUOTE_STATUSES = ["draft", "sent", "accepted"]
PAYMENT_STATUSES = ["unpaid", "partial", "paid"]


async def seed():
    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with engine.begin() as conn:
        await conn.execute(text('CREATE EXTENSION IF NOT EXISTS "pgcrypto"'))
        await conn.run_sync(Base.metadata.create_all)
    print("Tables ready")

    async with session_maker() as session:
        await session.execute(
            text("DELETE FROM organizations WHERE id = :org"), {"org": DEMO_ORG_ID}
        )
        await session.commit()

        org = Organization(id=DEMO_ORG_ID, name="Demo Business", timezone=DEMO_TIMEZONE)
        session.add(org)
        await session.flush()
        print(f"Created organization {org.name} ({DEMO_TIMEZONE})")

        for i, company in enumerate(COMPANIES):
            session.add(
                Vendor(
                    organization_id=org.id,
                    name=company,
                    status="active" if i % 2 == 0 else "inactive",
                    type="supplier",
                )
            )
        customers = []
        for i, company in enumerate(COMPANIES):
            customer = Customer(
                organization_id=org.id,
                first_name=["Ada", "Grace", "Alan", "Edsger", "Barbara"][i],
                last_name=["Lovelace", "Hopper", "Turing", "Dijkstra", "Liskov"][i],
                email=f"contact{i}@example.com",
                company=company,
            )
            session.add(customer)
            customers.append(customer)
        await session.flush()

        for i in range(12):
            session.add(
                Lead(
                    organization_id=org.id,
                    first_name=["Ahmed", "Fatima", "Maria", "John"][i % 4],
                    last_name=["Khan", "Smith", "Garcia", "Acme"][i % 4],
                    email=f"lead{i}@example.com",
                    company=COMPANIES[i % len(COMPANIES)],
                    status=LEAD_STATUSES[i % len(LEAD_STATUSES)],
                    lead_source="web",
                )
            )
            session.add(
                SupportCase(
                    organization_id=org.id,
                    title=f"{COMPANIES[i % len(COMPANIES)]} login issue #{i + 1}",
                    status=CASE_STATUSES[i % len(CASE_STATUSES)],
                    type="support",
                )
            )
            session.add(
                Opportunity(
                    organization_id=org.id,
                    name=f"{COMPANIES[i % len(COMPANIES)]} renewal {i + 1}",
                    stage=STAGES[i % len(STAGES)],
                    type="renewal",
                    amount=Decimal(1500 * (i + 1)),
                )
            )
            customer = customers[i % len(customers)]
            session.add(
                Quote(
                    organization_id=org.id,
                    customer_id=customer.id,
                    quote_number=f"Q-{1000 + i}",
                    status=QUOTE_STATUSES[i % len(QUOTE_STATUSES)],
                    total_amount=Decimal("249.50") * (i + 1),
                )
            )
            session.add(
                Order(
                    organization_id=org.id,
                    customer_id=customer.id,
                    order_number=f"SO-{2000 + i}",
                    po_number=f"PO-{3000 + i}",
                    status="pending",
                    payment_status=PAYMENT_STATUSES[i % len(PAYMENT_STATUSES)],
                    total_amount=Decimal(400 + 10 * i),
                )
            )
            session.add(
                Product(
                    organization_id=org.id,
                    name=f"Widget {i + 1}",
                    price=Decimal("19.99") + i,
                    status="active",
                    category="hardware",
                    sku=f"WID-{i + 1:03d}",
                )
            )
        await session.flush()
        print("Created searchable records")

        # Tasks spread around today, at a fixed local afternoon time
        now = datetime.now(timezone.utc).replace(hour=22, minute=0, second=0, microsecond=0)
        for i in range(30):
            session.add(
                Task(
                    organization_id=org.id,
                    title=f"Follow up with {COMPANIES[i % len(COMPANIES)]}",
                    is_done=i % 4 == 0,
                    is_personal=i % 7 == 0,
                    due_date=now + timedelta(days=i - 15),
                    assigned_to=DEMO_USER_ID if i % 3 else OTHER_USER_ID,
                    created_by=DEMO_USER_ID if i % 7 == 0 else OTHER_USER_ID,
                )
            )
        session.add(
            Task(
                organization_id=org.id,
                title="Unscheduled backlog item",
                created_by=DEMO_USER_ID,
            )
        )

        session.add(
            NotificationPreference(
                organization_id=org.id,
                user_id=DEMO_USER_ID,
                type="general",
                do_not_disturb=True,
                dnd_start_time="22:00",
                dnd_end_time="08:00",
            )
        )
        session.add(
            Notification(
                organization_id=org.id,
                user_id=DEMO_USER_ID,
                type="case_assigned",
                title="Welcome to the business hub",
                description="Sample notification",
            )
        )
        await session.commit()

        task_cnt = await session.scalar(
            select(func.count()).select_from(Task).where(Task.organization_id == org.id)
        )
        print("\nValidation:")
        print(f"  Tasks: {task_cnt}")
        print(f"  Organization id: {DEMO_ORG_ID}")
        print(f"  User id: {DEMO_USER_ID}")
        print("Seeding complete")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
