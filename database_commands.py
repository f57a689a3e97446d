#!/usr/bin/env python3
"""
Database Management Commands for the ride share API

Usage:
    python database_commands.py --help
    python database_commands.py init-db
    python database_commands.py create-user --username asha --email asha@example.com --password secret --role driver
    python database_commands.py purge-rides
    python database_commands.py status
"""

import sys
import argparse
import logging
from app import create_app, db

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

def cmd_init_db(args, app):
    """Create all tables (create_app already does this; kept for explicit setup)."""
    with app.app_context():
        db.create_all()
    print("Database tables created")
    return 0

def cmd_create_user(args, app):
    from services import UserService
    from services.errors import ServiceError

    with app.app_context():
        try:
            user = UserService().create_user(
                args.username, args.email, args.password, role=args.role,
                phone_number=args.phone, gender=args.gender, upi_id=args.upi_id,
            )
        except ServiceError as e:
            print(f"Error: {e.message}")
            return 1
        print(f"Created user {user.id} ({user.email})")
    return 0

def cmd_purge_rides(args, app):
    from services import RideService

    with app.app_context():
        deleted = RideService().purge_expired_rides()
        db.session.commit()
    print(f"Purged {deleted} expired rides")
    return 0

def cmd_status(args, app):
    from models import User, Ride, RideRequest, Progress, Feedback

    with app.app_context():
        print("=" * 40)
        print("DATABASE STATUS REPORT")
        print("=" * 40)
        print(f"Engine: {db.engine.url.render_as_string(hide_password=True)}")
        for model in (User, Ride, RideRequest, Progress, Feedback):
            print(f"  {model.__tablename__}: {model.query.count()} records")
    return 0

def build_parser():
    parser = argparse.ArgumentParser(description='Ride share database management')
    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('init-db', help='Create database tables').set_defaults(func=cmd_init_db)

    create_user = subparsers.add_parser('create-user', help='Register a user account')
    create_user.add_argument('--username', required=True)
    create_user.add_argument('--email', required=True)
    create_user.add_argument('--password', required=True)
    create_user.add_argument('--role', choices=['rider', 'driver'], default='rider')
    create_user.add_argument('--phone')
    create_user.add_argument('--gender')
    create_user.add_argument('--upi-id', dest='upi_id')
    create_user.set_defaults(func=cmd_create_user)

    subparsers.add_parser('purge-rides', help='Delete rides scheduled in the past').set_defaults(func=cmd_purge_rides)
    subparsers.add_parser('status', help='Show row counts per table').set_defaults(func=cmd_status)
    return parser

def main(argv=None, app=None):
    args = build_parser().parse_args(argv)
    app = app or create_app()
    return args.func(args, app)

if __name__ == '__main__':
    sys.exit(main())
