def test_generated_import_is_rate_limited_end_to_end(client, service, clock):
    """
    End-to-end test covering:
    - API layer
    - Rate limit gate ahead of AI-triggered writes
    - Bulk import with temp-id resolution
    - Aggregated read
    - Window reset
    """

    headers = {"X-User-Id": "writer"}
    mind_map_id = client.post(
        "/mindmaps/", json={"title": "Generated"}, headers=headers
    ).json()["id"]

    payload = {
        "action": "ai:expandNode",
        "nodes": [
            {"temp_id": "t0", "label": "Topic", "position_x": 0, "position_y": 0,
             "level": 0, "order": 0},
            {"temp_id": "t1", "parent_temp_id": "t0", "label": "Subtopic",
             "position_x": 0, "position_y": 100, "level": 1, "order": 0},
        ],
    }

    # ---------------- First call consumes the only slot ----------------

    response = client.post(f"/mindmaps/{mind_map_id}/generated", json=payload, headers=headers)
    assert response.status_code == 201
    id_map = response.json()["id_map"]
    assert set(id_map) == {"t0", "t1"}

    # ---------------- Second call is denied without writing ----------------

    response = client.post(f"/mindmaps/{mind_map_id}/generated", json=payload, headers=headers)
    assert response.status_code == 429
    assert "Retry-After" in response.headers
    assert response.json()["error"] == "rate_limited"

    data = client.get(f"/mindmaps/{mind_map_id}").json()
    assert len(data["nodes"]) == 2
    assert len(data["edges"]) == 1

    # ---------------- Failed import does not consume budget ----------------

    clock.advance(1_001)
    response = client.post("/mindmaps/missing/generated", json=payload, headers=headers)
    assert response.status_code == 404
    assert service.check_rate_limit("writer", "ai:expandNode").remaining == 1

    # ---------------- New window ----------------

    response = client.post(f"/mindmaps/{mind_map_id}/generated", json=payload, headers=headers)
    assert response.status_code == 201
    data = client.get(f"/mindmaps/{mind_map_id}").json()
    assert len(data["nodes"]) == 4
