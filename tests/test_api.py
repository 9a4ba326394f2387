import pytest

from shopsense.config import settings


@pytest.fixture
def shop_id(client):
    response = client.post("/shops/", json={"name": "Lakshmi Kirana", "address": "Main Road"})
    assert response.status_code == 201
    shop_id = response.json()["id"]

    for item in [
        {"item_name": "Rice", "unit": "kg", "quantity_on_hand": 5, "cost_price": 40, "selling_price": 50},
        {"item_name": "Milk", "unit": "litre", "quantity_on_hand": 20, "cost_price": 25, "selling_price": 30},
        {"item_name": "Toor Dal", "unit": "kg", "quantity_on_hand": 0, "cost_price": 90, "selling_price": 110},
    ]:
        assert client.post(f"/shops/{shop_id}/inventory/", json=item).status_code == 201

    return shop_id


def cart_url(shop_id, session_id="till-1"):
    return f"/shops/{shop_id}/cart/{session_id}"


def add_text(client, shop_id, text, session_id="till-1"):
    return client.post(f"{cart_url(shop_id, session_id)}/items", json={"text": text})


def inventory_by_name(client, shop_id):
    return {i["item_name"]: i for i in client.get(f"/shops/{shop_id}/inventory/").json()}


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_unknown_shop(client):
    assert client.get("/shops/42").status_code == 404
    assert add_text(client, 42, "2kg rice").status_code == 404


def test_inventory_crud(client, shop_id):
    duplicate = client.post(
        f"/shops/{shop_id}/inventory/",
        json={"item_name": "rice", "unit": "kg", "selling_price": 50},
    )
    assert duplicate.status_code == 400

    milk = inventory_by_name(client, shop_id)["Milk"]
    updated = client.put(
        f"/shops/{shop_id}/inventory/{milk['id']}", json={"quantity_on_hand": 12}
    )
    assert updated.json()["quantity_on_hand"] == 12

    found = client.get(f"/shops/{shop_id}/inventory/search", params={"q": "dal"}).json()
    assert [i["item_name"] for i in found] == ["Toor Dal"]

    assert client.delete(f"/shops/{shop_id}/inventory/{milk['id']}").status_code == 200
    assert "Milk" not in inventory_by_name(client, shop_id)


def test_parse_preview_does_not_touch_cart(client, shop_id):
    preview = client.post(f"/shops/{shop_id}/parse", json={"text": "2kg chawal"}).json()

    assert preview["matched"] is True
    assert preview["item_name"] == "Rice"
    assert preview["quantity"] == 2
    assert preview["unit"] == "kg"
    assert client.get(cart_url(shop_id)).json()["entries"] == []


def test_add_item_from_text(client, shop_id):
    response = add_text(client, shop_id, "2kg rice")

    assert response.status_code == 200
    body = response.json()
    assert body["entries"][0]["item_name"] == "Rice"
    assert body["entries"][0]["quantity"] == 2
    assert body["entries"][0]["unit"] == "kg"
    assert body["total_amount"] == 100


def test_exact_name_adds_one_unit(client, shop_id):
    entry = add_text(client, shop_id, "Rice").json()["entries"][0]

    assert entry["quantity"] == 1
    assert entry["unit"] == "kg"


def test_insufficient_stock_leaves_cart(client, shop_id):
    add_text(client, shop_id, "3kg rice")

    response = add_text(client, shop_id, "4kg rice")

    assert response.status_code == 409
    assert response.json()["error"] == "INSUFFICIENT_STOCK"
    assert response.json()["shortfall"] == 2
    assert client.get(cart_url(shop_id)).json()["entries"][0]["quantity"] == 3


def test_rejections(client, shop_id):
    missing = add_text(client, shop_id, "2 sabun")
    assert missing.status_code == 404
    assert missing.json()["error"] == "ITEM_NOT_FOUND"

    empty = add_text(client, shop_id, "1kg toor dal")
    assert empty.status_code == 409
    assert empty.json()["error"] == "OUT_OF_STOCK"

    assert client.get(cart_url(shop_id)).json()["entries"] == []


def test_update_and_remove_entry(client, shop_id):
    entry_id = add_text(client, shop_id, "2kg rice").json()["entries"][0]["entry_id"]
    url = f"{cart_url(shop_id)}/items/{entry_id}"

    assert client.patch(url, json={"quantity": 4}).json()["entries"][0]["quantity"] == 4
    assert client.patch(url, json={"quantity": 9}).status_code == 409
    assert client.delete(url).json()["entries"] == []
    assert client.delete(url).status_code == 404


def test_custom_item(client, shop_id):
    response = client.post(
        f"{cart_url(shop_id)}/custom-items",
        json={"item_name": "Carry bag", "quantity": 2, "selling_price": 5},
    )

    entry = response.json()["entries"][0]
    assert entry["inventory_id"] is None
    assert response.json()["total_amount"] == 10


def test_commit_creates_bill_and_clears_cart(client, shop_id):
    add_text(client, shop_id, "2kg rice")
    add_text(client, shop_id, "ek litre doodh")

    response = client.post(f"{cart_url(shop_id)}/commit")

    assert response.status_code == 201
    assert response.json()["bill_number"] == 1
    assert response.json()["total_amount"] == 130
    assert client.get(cart_url(shop_id)).json()["entries"] == []

    stock = inventory_by_name(client, shop_id)
    assert stock["Rice"]["quantity_on_hand"] == 3
    assert stock["Milk"]["quantity_on_hand"] == 19

    again = client.post(f"{cart_url(shop_id)}/commit")
    assert again.status_code == 400
    assert again.json()["error"] == "EMPTY_CART"
    assert inventory_by_name(client, shop_id)["Rice"]["quantity_on_hand"] == 3


def test_commit_conflict_keeps_cart(client, shop_id):
    add_text(client, shop_id, "3kg rice", session_id="till-1")
    add_text(client, shop_id, "3kg rice", session_id="till-2")

    assert client.post(f"{cart_url(shop_id, 'till-1')}/commit").status_code == 201

    response = client.post(f"{cart_url(shop_id, 'till-2')}/commit")

    assert response.status_code == 409
    assert response.json()["error"] == "COMMIT_CONFLICT"
    assert client.get(cart_url(shop_id, "till-2")).json()["entries"][0]["quantity"] == 3
    assert inventory_by_name(client, shop_id)["Rice"]["quantity_on_hand"] == 2
    assert len(client.get(f"/shops/{shop_id}/bills/").json()) == 1


def test_bill_history_detail_and_receipt(client, shop_id, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "receipt_dir", str(tmp_path))
    add_text(client, shop_id, "2kg rice")
    client.post(f"{cart_url(shop_id)}/commit")

    bills = client.get(f"/shops/{shop_id}/bills/").json()
    assert [b["bill_number"] for b in bills] == [1]

    detail = client.get(f"/shops/{shop_id}/bills/1").json()
    assert detail["items"][0]["item_name"] == "Rice"
    assert detail["items"][0]["subtotal"] == 100

    pdf = client.get(f"/shops/{shop_id}/bills/1/pdf")
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"

    assert client.get(f"/shops/{shop_id}/bills/7").status_code == 404


def test_reports(client, shop_id):
    add_text(client, shop_id, "2kg rice")
    client.post(f"{cart_url(shop_id)}/commit")
    created = client.get(f"/shops/{shop_id}/bills/").json()[0]["created_at"]

    report = client.get(
        f"/shops/{shop_id}/reports/daily", params={"report_date": created[:10]}
    ).json()
    assert report["total_bills"] == 1
    assert report["total_sales"] == 100
    assert report["profit"] == 20

    top = client.get(f"/shops/{shop_id}/reports/top-sellers").json()
    assert top == [{"item_name": "Rice", "quantity": 2, "revenue": 100}]


def test_voice_session(client, shop_id):
    voice = f"{cart_url(shop_id)}/voice"
    token = client.post(f"{voice}/start").json()["token"]

    applied = client.post(f"{voice}/result", json={"token": token, "text": "rendu kg biyyam"}).json()
    assert applied["applied"] is True
    assert applied["cart"]["entries"][0]["quantity"] == 2

    noise = client.post(f"{voice}/result", json={"token": token, "text": "hm"}).json()
    assert noise["applied"] is False

    over = client.post(f"{voice}/result", json={"token": token, "text": "5kg rice"})
    assert over.status_code == 409
    assert over.json()["error"] == "INSUFFICIENT_STOCK"

    client.post(f"{voice}/stop")
    stale = client.post(f"{voice}/result", json={"token": token, "text": "1 litre milk"})
    assert stale.status_code == 409
    assert stale.json()["error"] == "STALE_TRANSCRIPTION"
    assert len(client.get(cart_url(shop_id)).json()["entries"]) == 1


def test_voice_restart_discards_old_token(client, shop_id):
    voice = f"{cart_url(shop_id)}/voice"
    old = client.post(f"{voice}/start").json()["token"]
    client.post(f"{voice}/start")

    stale = client.post(f"{voice}/result", json={"token": old, "text": "2kg rice"})

    assert stale.status_code == 409
    assert client.get(cart_url(shop_id)).json()["entries"] == []


def test_discard_cart(client, shop_id):
    add_text(client, shop_id, "2kg rice")

    assert client.delete(cart_url(shop_id)).status_code == 200
    assert client.get(cart_url(shop_id)).json()["entries"] == []


def test_viewing_unknown_carts_opens_no_session(client, app, shop_id):
    for i in range(50):
        view = client.get(cart_url(shop_id, f"s{i}")).json()
        assert view == {"session_id": f"s{i}", "entries": [], "total_amount": 0, "total_cost": 0}
    client.post(f"{cart_url(shop_id, 's0')}/voice/stop")

    assert len(app.state.sessions) == 0


def test_commit_releases_the_session(client, app, shop_id):
    add_text(client, shop_id, "1kg rice", session_id="x")
    assert len(app.state.sessions) == 1

    assert client.post(f"{cart_url(shop_id, 'x')}/commit").status_code == 201

    assert len(app.state.sessions) == 0
    assert client.get(cart_url(shop_id, "x")).json()["entries"] == []


def test_commit_keeps_session_with_open_microphone(client, app, shop_id):
    voice = f"{cart_url(shop_id)}/voice"
    token = client.post(f"{voice}/start").json()["token"]
    client.post(f"{voice}/result", json={"token": token, "text": "1kg rice"})

    assert client.post(f"{cart_url(shop_id)}/commit").status_code == 201

    assert len(app.state.sessions) == 1
    again = client.post(f"{voice}/result", json={"token": token, "text": "2 litre milk"}).json()
    assert again["applied"] is True
    assert again["cart"]["entries"][0]["item_name"] == "Milk"


def test_voice_result_for_unknown_session_is_stale(client, app, shop_id):
    response = client.post(
        f"{cart_url(shop_id, 'never-opened')}/voice/result",
        json={"token": "abc", "text": "2kg rice"},
    )

    assert response.status_code == 409
    assert response.json()["error"] == "STALE_TRANSCRIPTION"
    assert len(app.state.sessions) == 0


def add_custom(client, shop_id, name, selling_price, cost_price):
    return client.post(
        f"{cart_url(shop_id)}/custom-items",
        json={"item_name": name, "quantity": 1, "selling_price": selling_price, "cost_price": cost_price},
    )


def test_low_stock_notifications(client, shop_id):
    notes = client.get(f"/shops/{shop_id}/notifications/").json()

    assert [(n["type"], n["item_name"]) for n in notes] == [
        ("low_stock", "Rice"),
        ("low_stock", "Toor Dal"),
    ]
    assert notes[0]["message"] == "Low Stock: Rice is running low (5 kg left)."
    assert notes[0]["severity"] == "warning"


def test_margin_notifications(client, shop_id):
    add_text(client, shop_id, "2kg rice")
    client.post(f"{cart_url(shop_id)}/commit")
    notes = client.get(f"/shops/{shop_id}/notifications/").json()
    assert {n["type"] for n in notes} == {"low_stock"}

    # 200 sold against 195 of cost
    add_custom(client, shop_id, "Gift hamper", 100, 115)
    client.post(f"{cart_url(shop_id)}/commit")
    notes = client.get(f"/shops/{shop_id}/notifications/").json()
    low = [n for n in notes if n["type"] == "low_profit"]
    assert len(low) == 1
    assert low[0]["severity"] == "alert"
    assert low[0]["message"] == "Low Profit Margin: Your margin is only 2.5% this month."

    add_custom(client, shop_id, "Damaged stock", 10, 100)
    client.post(f"{cart_url(shop_id)}/commit")
    notes = client.get(f"/shops/{shop_id}/notifications/").json()
    assert notes[-1]["type"] == "loss"
    assert notes[-1]["severity"] == "critical"
    assert "low_profit" not in {n["type"] for n in notes}


def test_daily_operations(client, shop_id):
    url = f"/shops/{shop_id}/daily-operations"
    assert client.get(f"{url}/active").json() is None
    assert client.get(f"{url}/today-bills").json() == []

    started = client.post(f"{url}/start")
    assert started.status_code == 201
    assert started.json()["status"] == "active"
    assert client.post(f"{url}/start").status_code == 400
    assert client.get(f"{url}/active").json()["id"] == started.json()["id"]

    add_text(client, shop_id, "2kg rice")
    client.post(f"{cart_url(shop_id)}/commit")

    today = client.get(f"{url}/today-bills").json()
    assert [(b["bill_number"], b["total_amount"]) for b in today] == [(1, 100)]
    since = client.get(
        f"{url}/today-bills", params={"start_time": started.json()["start_time"]}
    ).json()
    assert len(since) == 1

    ended = client.put(f"{url}/end")
    assert ended.status_code == 200
    assert ended.json()["status"] == "closed"
    assert ended.json()["total_bills"] == 1
    assert ended.json()["total_sales"] == 100
    assert ended.json()["total_cost"] == 80
    assert ended.json()["end_time"] is not None

    assert client.get(f"{url}/active").json() is None
    assert client.put(f"{url}/end").status_code == 404
    assert [d["id"] for d in client.get(f"{url}/past").json()] == [started.json()["id"]]


def test_past_days_keep_the_last_seven(client, shop_id):
    url = f"/shops/{shop_id}/daily-operations"
    ids = []
    for _ in range(9):
        ids.append(client.post(f"{url}/start").json()["id"])
        client.put(f"{url}/end")

    past = client.get(f"{url}/past").json()

    assert len(past) == 7
    assert [d["id"] for d in past] == ids[::-1][:7]
