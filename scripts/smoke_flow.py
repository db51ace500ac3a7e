"""
End-to-end wallet flow against a running API.

Walks through: register -> deposit request -> admin approval -> wallet balance.
Needs an admin account (see scripts/create_admin.py).
"""

import json
import os
import uuid

import requests

BASE_URL = os.getenv("SMOKE_BASE_URL", "http://localhost:8000/api/v1")


def print_section(title):
    print("\n" + "=" * 80)
    print(f"  {title}")
    print("=" * 80)


def print_response(data):
    print(json.dumps(data, indent=2, ensure_ascii=False))


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


def main():
    print("\n🚀 Chợ Của Tui - Wallet Flow Smoke Test\n")

    # ============================================================================
    # STEP 1: Register a buyer
    # ============================================================================
    print_section("STEP 1: Register")

    email = f"smoke_{uuid.uuid4().hex[:8]}@example.com"
    response = requests.post(f"{BASE_URL}/auth/register", json={"email": email, "password": "smoke-pass", "name": "Smoke Test"})
    result = response.json()
    print_response(result)

    if response.status_code != 201:
        print(f"\n❌ Registration failed: {result.get('error')}")
        return

    token = result["access_token"]
    print(f"\n✅ Registered {email}")

    # ============================================================================
    # STEP 2: Request a deposit
    # ============================================================================
    print_section("STEP 2: Deposit request")

    response = requests.post(
        f"{BASE_URL}/wallet/deposits",
        json={"amount": 50000, "method": "bank_transfer"},
        headers=auth_headers(token)
    )
    deposit = response.json()
    print_response(deposit)

    if response.status_code != 201:
        print(f"\n❌ Deposit failed: {deposit.get('error')}")
        return

    # ============================================================================
    # STEP 3: Admin approves
    # ============================================================================
    print_section("STEP 3: Admin approval")

    admin_email = input("Admin e-mail: ").strip()
    admin_password = input("Admin password: ").strip()

    response = requests.post(f"{BASE_URL}/auth/login", json={"email": admin_email, "password": admin_password})
    if response.status_code != 200:
        print(f"\n❌ Admin login failed: {response.json().get('error')}")
        return
    admin_token = response.json()["access_token"]

    response = requests.post(
        f"{BASE_URL}/admin/transactions/{deposit['id']}/approve",
        headers=auth_headers(admin_token)
    )
    print_response(response.json())

    # ============================================================================
    # STEP 4: Check balance
    # ============================================================================
    print_section("STEP 4: Wallet balance")

    response = requests.get(f"{BASE_URL}/auth/me", headers=auth_headers(token))
    profile = response.json()
    print(f"💰 Balance: {profile.get('wallet_balance')}")

    if profile.get("wallet_balance") == 50000:
        print("\n✅ Flow completed successfully!")
    else:
        print("\n❌ Balance does not match the approved deposit")


if __name__ == "__main__":
    main()
