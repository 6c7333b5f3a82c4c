API = "/api/v1"


async def test_audit_log_listing(client):
    content = (await client.post(f"{API}/content", json={"title": "Rashomon", "content_type": "MOVIE"})).json()
    await client.put(f"{API}/content/{content['id']}", json={"genre": "Drama", "updated_by": "editor"})

    response = await client.get(f"{API}/audit-logs/", params={"table_name": "content", "record_id": content["id"]})

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert {item["action"] for item in body["items"]} == {"INSERT", "UPDATE"}

    updates = (await client.get(f"{API}/audit-logs/", params={"action": "UPDATE"})).json()
    assert updates["total"] == 1
    assert updates["items"][0]["performed_by"] == "editor"
    assert updates["items"][0]["new_value"]["genre"] == "Drama"


async def test_rejected_write_leaves_no_audit_row(client):
    await client.post(f"{API}/content", json={"title": "Ran", "content_type": "MOVIE"})
    await client.post(f"{API}/content", json={"title": "Ran", "content_type": "MOVIE"})

    body = (await client.get(f"{API}/audit-logs/", params={"table_name": "content"})).json()
    assert body["total"] == 1
