import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from landrental import create_app, DEMO_USERS, DEMO_PASSWORD
from landrental.models import User

app = create_app()
with app.app_context():
    for user_data in DEMO_USERS:
        user = User.query.filter_by(email=user_data['email']).first()
        if user:
            print(f"{user.email}: id={user.id} type={user.user_type} "
                  f"active={user.is_active} password_ok={user.check_password(DEMO_PASSWORD)}")
        else:
            print(f"{user_data['email']} not found")

    # List all users
    users = User.query.order_by(User.id).all()
    print('\nAll users in database:')
    for u in users:
        print(f'  ID {u.id}: {u.name} <{u.email}> ({u.user_type})')
