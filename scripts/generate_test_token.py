#!/usr/bin/env python3
"""
Mint a Firebase ID token for manual API testing, optionally forcing the
account's subscription status to try Pro-only filters without Stripe.

Usage:
    ENV=staging python scripts/generate_test_token.py --email runner@example.com
    ENV=local python scripts/generate_test_token.py --email runner@example.com --status active
"""

import argparse
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

env = os.getenv("ENV", "local")
env_file = f".env.{env}"
if os.path.exists(env_file):
    load_dotenv(env_file)
    print(f"Loaded environment from: {env_file}")

import requests
from firebase_admin import auth
from sqlalchemy import select

from app.db import get_sync_db_session
from app.models import User, SubscriptionStatus
from app.utils.environment import is_production
from app.services.firebase import initialize_firebase

SIGN_IN_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithCustomToken"


def get_or_create_firebase_uid(email: str) -> str:
    initialize_firebase()
    try:
        return auth.get_user_by_email(email).uid
    except auth.UserNotFoundError:
        user = auth.create_user(email=email, email_verified=True)
        print(f"Created Firebase user: {user.uid}")
        return user.uid


def mint_id_token(uid: str, email: str, api_key: str) -> str:
    """Create a custom token and exchange it for an ID token via the Auth REST API."""
    custom_token = auth.create_custom_token(uid, {"email": email, "email_verified": True})
    if isinstance(custom_token, bytes):
        custom_token = custom_token.decode()

    response = requests.post(
        f"{SIGN_IN_URL}?key={api_key}",
        json={"token": custom_token, "returnSecureToken": True},
        timeout=10,
    )
    response.raise_for_status()
    return response.json()["idToken"]


def set_subscription_status(uid: str, email: str, status: str) -> None:
    """Upsert the local account and force its subscription status."""
    with get_sync_db_session() as db:
        user = db.execute(select(User).where(User.firebase_uid == uid)).scalar_one_or_none()
        if user is None:
            user = User(firebase_uid=uid, email=email)
            db.add(user)
        user.subscription_status = status
    print(f"Set subscription_status={status} for {email}")


def main():
    parser = argparse.ArgumentParser(description="Generate a Firebase ID token for testing")
    parser.add_argument("--email", required=True, help="Email of the test account")
    parser.add_argument(
        "--status",
        choices=[s.value for s in SubscriptionStatus],
        help="Force the local account's subscription status (never use against production)",
    )
    args = parser.parse_args()

    api_key = os.getenv("FIREBASE_API_KEY")
    if not api_key:
        sys.exit("FIREBASE_API_KEY is required to exchange the custom token")

    uid = get_or_create_firebase_uid(args.email)

    if args.status:
        if is_production():
            sys.exit("Refusing to change subscription status in production")
        set_subscription_status(uid, args.email, args.status)

    id_token = mint_id_token(uid, args.email, api_key)
    print(f"\nID Token:\n{id_token}")
    print(f'\ncurl -H "Authorization: Bearer {id_token[:40]}..." http://localhost:8000/api/v1/races')


if __name__ == "__main__":
    main()
