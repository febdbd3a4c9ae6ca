import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from landrental import create_app, DEMO_USERS, DEMO_PASSWORD
from landrental.models import db, User

app = create_app()


def reset_passwords():
    with app.app_context():
        updated_count = 0

        for user_data in DEMO_USERS:
            user = User.query.filter_by(email=user_data['email']).first()
            if user:
                user.set_password(DEMO_PASSWORD)
                user.is_active = True
                updated_count += 1
                print(f"Updated password for {user.email}")
            else:
                print(f"User {user_data['email']} not found. (Use seed_demo_users.py to create)")

        if updated_count > 0:
            db.session.commit()
            print(f"Successfully updated passwords for {updated_count} users.")


if __name__ == '__main__':
    reset_passwords()
