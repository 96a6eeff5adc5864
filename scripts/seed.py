"""Database Seed Script - Populates demo accounts"""
import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from app.database import AsyncSessionLocal, init_db, close_db
from app.models import Account
from app.config import settings
from app.services.account_store import AccountStore
from app.services.identity import create_access_token


DEMO_USERS = [
    {"email": "john@college.edu", "name": "John Student"},
    {"email": "jane@college.edu", "name": "Jane Smith"},
    {"email": "mike@university.edu", "name": "Mike Johnson"},
]


async def seed_database():
    """Seed the database with demo accounts"""
    print("=" * 60)
    print("DATABASE SEEDING STARTED")
    print("=" * 60)

    await init_db()

    async with AsyncSessionLocal() as session:
        try:
            result = await session.execute(select(Account))
            if result.scalars().first():
                print("\nDatabase already seeded. Skipping...")
                return

            print("\nCreating demo accounts...")

            store = AccountStore(session)
            accounts = []
            for user in DEMO_USERS:
                account = await store.create_account(
                    email=user["email"],
                    name=user["name"],
                    balance=settings.STARTING_BALANCE,
                )
                accounts.append(account)
                print(f"   + {account.name} <{account.email}>: {account.balance}")

            await session.commit()

            print("\n" + "=" * 60)
            print("DATABASE SEEDING COMPLETED SUCCESSFULLY")
            print("=" * 60)

            print("\nDEV BEARER TOKENS:")
            for account in accounts:
                print(f"   {account.email}: {create_access_token(account.id)}")

            print("\nSAMPLE API REQUESTS:")
            print("   GET  /api/v1/users/balance")
            print("   POST /api/v1/transactions")
            print("        Header: Idempotency-Key: send_john_001")
            print("        Body: {\"type\": \"send\", \"amount\": 15.5, \"recipientEmail\": \"mike@university.edu\"}")
            print("   POST /api/v1/transactions")
            print("        Body: {\"type\": \"charge\", \"amount\": 50}")
            print("   GET  /api/v1/transactions/history")

        except Exception as e:
            await session.rollback()
            print(f"\nERROR during seeding: {str(e)}")
            raise


async def main():
    """Main entry point"""
    try:
        await seed_database()
    except Exception as e:
        print(f"\nSeeding failed: {str(e)}")
        sys.exit(1)
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
