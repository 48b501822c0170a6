MEASUREMENTS = {"bust": 92, "waist": 70, "hips": 99}


def test_estimate(client, headers):
    r = client.post("/v1/estimate", json={"gender": "masculino", "height": 180, "weight": 80, "age": 25}, headers=headers)
    assert r.status_code == 200
    assert r.json() == {"bust": 106, "waist": 84, "hips": 96}


def test_estimate_rejects_out_of_range_input(client, headers):
    r = client.post("/v1/estimate", json={"gender": "feminino", "height": 99, "weight": 65, "age": 30}, headers=headers)
    assert r.status_code == 422
    r = client.post("/v1/estimate", json={"gender": "outro", "height": 165, "weight": 65, "age": 30}, headers=headers)
    assert r.status_code == 422


def test_recommend(client, headers, size_chart):
    r = client.post("/v1/recommend", json={"measurements": MEASUREMENTS, "size_chart": size_chart}, headers=headers)
    assert r.status_code == 200
    rec = r.json()["recommendation"]
    assert rec["size"] == "M"
    assert rec["fit_level"] == "approximate"
    assert rec["alternative_size"] == "P"
    assert rec["comparison"][0] == {
        "measurement": "Busto",
        "user_value": 92.0,
        "product_range": "92 - 96",
        "product_center": 94.0,
        "difference": 2.0,
        "status": "ok",
    }
    assert r.json()["feedback"] is None


def test_recommend_is_repeatable(client, headers, size_chart):
    body = {"measurements": MEASUREMENTS, "size_chart": size_chart}
    first = client.post("/v1/recommend", json=body, headers=headers).json()
    second = client.post("/v1/recommend", json=body, headers=headers).json()
    assert first == second


def test_recommend_with_feedback(client, headers, size_chart):
    body = {"measurements": MEASUREMENTS, "size_chart": size_chart, "include_feedback": True}
    feedback = client.post("/v1/recommend", json=body, headers=headers).json()["feedback"]
    assert "between sizes M and P" in feedback["alternative"]


def test_no_recommendation_is_not_an_error(client, headers):
    body = {"measurements": MEASUREMENTS, "size_chart": {"U": {"Comprimento": "70"}}}
    r = client.post("/v1/recommend", json=body, headers=headers)
    assert r.status_code == 200
    assert r.json()["recommendation"] is None
    assert r.json()["message"]


def test_recommend_rejects_bad_charts(client, headers):
    for chart, status in (({"P": "92"}, 400), ({}, 400), (["P"], 422)):
        r = client.post("/v1/recommend", json={"measurements": MEASUREMENTS, "size_chart": chart}, headers=headers)
        assert r.status_code == status


def test_recommend_rejects_non_positive_measurements(client, headers, size_chart):
    body = {"measurements": {"bust": 0, "waist": 70, "hips": 99}, "size_chart": size_chart}
    assert client.post("/v1/recommend", json=body, headers=headers).status_code == 422


def test_size_chart_summary(client, headers, size_chart):
    r = client.post("/v1/size-chart/summary", json={"size_chart": size_chart}, headers=headers)
    assert r.status_code == 200
    assert r.json() == {"sizes": ["P", "M", "G"], "measurements": ["Busto", "Cintura", "Quadril"]}


def test_session_flow(client, headers, size_chart):
    r = client.post("/v1/sessions", headers=headers)
    assert r.status_code == 201
    sid = r.json()["id"]
    assert r.json()["step"] == "user-data"

    r = client.post(f"/v1/sessions/{sid}/result", json={"size_chart": size_chart}, headers=headers)
    assert r.status_code == 409

    r = client.put(f"/v1/sessions/{sid}/basic-data", json={"gender": "feminino", "height": 165, "weight": 65, "age": 30}, headers=headers)
    assert r.json()["step"] == "adjust"
    assert r.json()["measurements"]["bust"] == 96

    r = client.put(f"/v1/sessions/{sid}/measurements", json=MEASUREMENTS, headers=headers)
    assert r.json()["step"] == "result"

    r = client.post(f"/v1/sessions/{sid}/result", json={"size_chart": size_chart, "include_feedback": True}, headers=headers)
    assert r.status_code == 200
    assert r.json()["recommendation"]["size"] == "M"

    r = client.post(f"/v1/sessions/{sid}/step", json={"step": "adjust"}, headers=headers)
    assert r.json()["step"] == "adjust"

    assert client.delete(f"/v1/sessions/{sid}", headers=headers).status_code == 204
    assert client.get(f"/v1/sessions/{sid}", headers=headers).status_code == 404


def test_session_restores_saved_answers(client, headers):
    body = {"measurements": MEASUREMENTS}
    sid = client.post("/v1/sessions", json=body, headers=headers).json()["id"]
    r = client.get(f"/v1/sessions/{sid}", headers=headers)
    assert r.json()["measurements"] == {"bust": 92.0, "waist": 70.0, "hips": 99.0}
    assert r.json()["user_data"] is None


def test_session_step_requires_measurements(client, headers):
    sid = client.post("/v1/sessions", headers=headers).json()["id"]
    r = client.post(f"/v1/sessions/{sid}/step", json={"step": "result"}, headers=headers)
    assert r.status_code == 409


def test_unknown_session(client, headers):
    assert client.get("/v1/sessions/missing", headers=headers).status_code == 404
    assert client.put("/v1/sessions/missing/measurements", json=MEASUREMENTS, headers=headers).status_code == 404


def test_reordered_chart_is_not_served_from_cache(client, headers):
    from app.schemas.sizing import UserMeasurements
    from app.services.recommender import recommend

    body = UserMeasurements(**MEASUREMENTS)
    charts = [
        {"X": {"Bust": "92"}, "Y": {"Bust": "92"}},
        {"Y": {"Bust": "92"}, "X": {"Bust": "92"}},
        {"M": {"Busto": "92 - 96", "Cintura": "74 - 78"}},
        {"M": {"Cintura": "74 - 78", "Busto": "92 - 96"}},
    ]
    for chart in charts:
        for _ in range(2):
            r = client.post("/v1/recommend", json={"measurements": MEASUREMENTS, "size_chart": chart}, headers=headers)
            assert r.json()["recommendation"] == recommend(body, chart).model_dump(mode="json")

    swapped = client.post("/v1/recommend", json={"measurements": MEASUREMENTS, "size_chart": charts[1]}, headers=headers)
    assert swapped.json()["recommendation"]["size"] == "Y"
    reordered = client.post("/v1/recommend", json={"measurements": MEASUREMENTS, "size_chart": charts[3]}, headers=headers)
    assert [c["measurement"] for c in reordered.json()["recommendation"]["comparison"]] == ["Cintura", "Busto"]
