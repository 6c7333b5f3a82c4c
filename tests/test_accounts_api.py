API = "/api/v1"


async def create_user(client, username="viewer", **fields):
    payload = {"username": username, "email": f"{username}@streamhub.io", "password": "s3cret-pass", **fields}
    response = await client.post(f"{API}/users", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def create_plan(client, name="Premium", price="9.99", **fields):
    response = await client.post(f"{API}/plans/", json={"plan_name": name, "price": price, **fields})
    assert response.status_code == 201, response.text
    return response.json()


async def test_users_and_roles(client):
    response = await client.post(f"{API}/roles", json={"role_name": "SUBSCRIBER"})
    assert response.status_code == 201

    user = await create_user(client, roles=["SUBSCRIBER"])
    assert user["roles"] == ["SUBSCRIBER"]
    assert user["status"] == "ACTIVE"
    assert "password_hash" not in user

    duplicate = await client.post(
        f"{API}/users", json={"username": "viewer", "email": "other@streamhub.io", "password": "s3cret-pass"}
    )
    assert duplicate.status_code == 400
    assert duplicate.json()["error_code"] == "DUPLICATE_USER"

    unknown_role = await client.post(
        f"{API}/users",
        json={"username": "second", "email": "second@streamhub.io", "password": "s3cret-pass", "roles": ["GOD"]},
    )
    assert unknown_role.status_code == 400

    response = await client.patch(f"{API}/users/{user['id']}/status", json={"status": "SUSPENDED"})
    assert response.json()["status"] == "SUSPENDED"

    response = await client.put(f"{API}/users/{user['id']}/roles", json={"roles": []})
    assert response.json()["roles"] == []


async def test_plans(client):
    plan = await create_plan(client, "Basic", "4.50", duration_days=14, features={"hd": False})
    assert plan["duration_days"] == 14

    response = await client.patch(f"{API}/plans/{plan['id']}", json={"is_active": False})
    assert response.json()["is_active"] is False

    assert (await client.get(f"{API}/plans/")).json() == []
    assert len((await client.get(f"{API}/plans/", params={"active_only": False})).json()) == 1


async def test_subscription_payment_flow(client):
    user = await create_user(client)
    plan = await create_plan(client)

    response = await client.post(f"{API}/subscriptions/", json={"user_id": user["id"], "plan_id": plan["id"]})
    assert response.status_code == 201
    sub = response.json()
    assert sub["status"] == "ACTIVE"

    response = await client.post(f"{API}/subscriptions/", json={"user_id": user["id"], "plan_id": plan["id"]})
    assert response.status_code == 409
    assert response.json()["error_code"] == "ACTIVE_SUBSCRIPTION_EXISTS"

    base = {"subscription_id": sub["id"], "user_id": user["id"], "amount": "9.99", "payment_method": "CARD"}
    response = await client.post(f"{API}/payments/", json={**base, "transaction_status": "FAILED"})
    assert response.status_code == 201
    assert response.json()["subscription_status"] == "PAST_DUE"

    response = await client.post(f"{API}/payments/", json={**base, "transaction_status": "SUCCESS"})
    assert response.json()["subscription_status"] == "ACTIVE"

    history = (await client.get(f"{API}/subscriptions/{sub['id']}/payments")).json()
    assert history["total"] == 2
    assert {p["transaction_status"] for p in history["items"]} == {"FAILED", "SUCCESS"}

    failed = (await client.get(f"{API}/payments/", params={"status": "FAILED"})).json()
    assert failed["total"] == 1

    response = await client.post(f"{API}/subscriptions/{sub['id']}/cancel", json={"reason": "moving"})
    assert response.json()["status"] == "CANCELLED"

    response = await client.post(f"{API}/subscriptions/{sub['id']}/cancel")
    assert response.status_code == 409


async def test_manual_expiry_sweep(client):
    user = await create_user(client)
    plan = await create_plan(client, duration_days=30)
    sub = (await client.post(
        f"{API}/subscriptions/",
        json={"user_id": user["id"], "plan_id": plan["id"], "start_date": "2026-01-01"},
    )).json()

    response = await client.post(f"{API}/subscriptions/expire", params={"as_of": "2026-03-01"})

    assert response.status_code == 200
    assert response.json()["expired_ids"] == [sub["id"]]
    assert (await client.get(f"{API}/subscriptions/{sub['id']}")).json()["status"] == "EXPIRED"


async def test_access_endpoint_and_logs(client):
    user = await create_user(client)
    content = (await client.post(
        f"{API}/content", json={"title": "Premium Show", "content_type": "SERIES", "status": "ACTIVE", "is_premium": True}
    )).json()

    response = await client.post(
        f"{API}/content/{content['id']}/access",
        json={"user_id": user["id"]},
        headers={"user-agent": "TestPlayer/2.0"},
    )
    assert response.status_code == 200
    assert response.json()["access_status"] == "DENIED_NO_SUBSCRIPTION"
    assert response.json()["granted"] is False

    logs = (await client.get(f"{API}/access-logs", params={"user_id": user["id"]})).json()
    assert logs["total"] == 1
    assert logs["items"][0]["user_agent"] == "TestPlayer/2.0"

    response = await client.post(f"{API}/access-logs", json={
        "content_id": content["id"], "user_id": user["id"], "access_status": "GRANTED",
    })
    assert response.status_code == 201

    granted = (await client.get(f"{API}/access-logs", params={"status": "GRANTED"})).json()
    assert granted["total"] == 1
