#!/usr/bin/env python3
"""
Demo User Seeding Script
Creates the demo landowner and farmer with consistent credentials for testing
"""
import sys
import os
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from landrental import create_app, seed_demo_users_if_needed, DEMO_USERS, DEMO_PASSWORD


def seed_demo_users():
    app = create_app()

    with app.app_context():
        result = seed_demo_users_if_needed()

        if result['errors']:
            print(f"Error creating demo users: {'; '.join(result['errors'])}")
            sys.exit(1)

        if not result['created']:
            print("Demo users already exist. Skipping seeding.")
            return

        print("Demo users created successfully!\n")
        print("=" * 60)
        print("DEMO LOGIN CREDENTIALS")
        print("=" * 60)
        print(f"Password for all users: {DEMO_PASSWORD}\n")
        for user_data in DEMO_USERS:
            print(f"{user_data['user_type'].title()}")
            print(f"   Email: {user_data['email']}")
            print(f"   Password: {DEMO_PASSWORD}\n")


if __name__ == '__main__':
    seed_demo_users()
