import asyncio
import sys
import os
import getpass

# Add project root to path
sys.path.append(os.getcwd())

from kotha.database import AsyncSessionLocal
from kotha.schemas.user import UserCreate
from kotha.services.auth import AuthService
from pydantic import ValidationError

async def create_admin():
    print("Create Admin User")
    print("-----------------")
    name = input("Enter name: ")
    email = input("Enter email: ")

    password = getpass.getpass("Enter password: ")
    confirm_password = getpass.getpass("Confirm password: ")
    if password != confirm_password:
        print("Passwords do not match.")
        return

    try:
        user_in = UserCreate(name=name, email=email, password=password)
    except ValidationError as e:
        print(f"Invalid input: {e}")
        return

    async with AsyncSessionLocal() as session:
        user = await AuthService(session).register_user(user_in, role="admin")
        if not user:
            print(f"Error: User '{email}' already exists.")
            return
        print(f"Success: Admin user '{user.email}' created.")

if __name__ == "__main__":
    asyncio.run(create_admin())
