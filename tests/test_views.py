import csv
from io import StringIO

from frontdesk.config import settings
from frontdesk.models import Booking, InventoryItem, Payment, PaymentType, Purchase, PurchaseStatus, Room, RoomStatus, User
from frontdesk.security import hash_password


def location(response):
    return response.headers["location"]


def add_room(client, number=101, room_type="ac"):
    return client.post("/app/rooms/new", data={"room_number": str(number), "type": room_type}, follow_redirects=False)


def check_in(client, room_id, **overrides):
    form = {
        "customer_name": "Asha Rao",
        "phone_number": "9876543210",
        "persons": "2",
        "extra_beds": "0",
        "initial_payment": "500",
        "rent_per_day": "500",
    }
    form.update(overrides)
    return client.post(f"/app/checkin/{room_id}", data=form, follow_redirects=False)


def only_room(db):
    db.expire_all()
    return db.query(Room).one()


def test_pages_require_login(client):
    for path in ("/app", "/app/rooms/", "/app/booked/", "/app/checkout/", "/app/shop/", "/app/payments/"):
        response = client.get(path, follow_redirects=False)
        assert response.status_code == 303
        assert location(response) == "/auth/login"


def test_root_redirects_to_dashboard(client):
    response = client.get("/", follow_redirects=False)
    assert response.status_code == 303
    assert location(response) == "/app"


def test_login_sets_session_cookie(client, db):
    db.add(User(email="desk@example.com", hashed_password=hash_password("s3cret-pass"), role="staff"))
    db.commit()

    response = client.post(
        "/auth/login",
        data={"email": "Desk@Example.com", "password": "s3cret-pass"},
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert location(response) == "/app"
    assert settings.SESSION_COOKIE_NAME in response.cookies


def test_login_with_wrong_password(client, db):
    db.add(User(email="desk@example.com", hashed_password=hash_password("s3cret-pass"), role="staff"))
    db.commit()

    response = client.post("/auth/login", data={"email": "desk@example.com", "password": "nope"})
    assert response.status_code == 400
    assert "Invalid email or password." in response.text


def test_logout_clears_session(auth_client):
    response = auth_client.post("/auth/logout", follow_redirects=False)
    assert response.status_code == 303
    assert location(response).startswith("/auth/login")


def test_dashboard_renders(auth_client):
    add_room(auth_client)
    response = auth_client.get("/app")
    assert response.status_code == 200
    assert settings.APP_NAME in response.text


def test_add_room_and_list(auth_client, db):
    response = add_room(auth_client, 101, "non-ac")
    assert response.status_code == 303
    assert "msg=" in location(response)

    page = auth_client.get("/app/rooms/")
    assert page.status_code == 200
    assert "Room 101" in page.text
    assert only_room(db).status == RoomStatus.AVAILABLE


def test_duplicate_room_shows_error(auth_client, db):
    add_room(auth_client, 101)
    response = add_room(auth_client, 101)
    assert "error=" in location(response)
    db.expire_all()
    assert db.query(Room).count() == 1


def test_check_in_flow(auth_client, db):
    add_room(auth_client)
    room = only_room(db)

    form = auth_client.get(f"/app/checkin/{room.id}")
    assert form.status_code == 200

    response = check_in(auth_client, room.id)
    assert response.status_code == 303
    assert location(response).startswith("/app/rooms/?msg=Check-in+successful+for+Asha+Rao")
    assert only_room(db).status == RoomStatus.OCCUPIED
    payment = db.query(Payment).one()
    assert payment.payment_type == PaymentType.CHECK_IN

    # The room is no longer offered for check-in.
    again = auth_client.get(f"/app/checkin/{room.id}", follow_redirects=False)
    assert "error=" in location(again)


def test_check_in_without_name_writes_nothing(auth_client, db):
    add_room(auth_client)
    room = only_room(db)
    response = check_in(auth_client, room.id, customer_name="")
    assert location(response).startswith(f"/app/checkin/{room.id}?error=")
    assert only_room(db).status == RoomStatus.AVAILABLE
    assert db.query(Booking).count() == 0


def test_booked_rooms_payment_and_rent(auth_client, db):
    add_room(auth_client)
    check_in(auth_client, only_room(db).id)
    booking = db.query(Booking).one()

    page = auth_client.get("/app/booked/")
    assert page.status_code == 200
    assert "Asha Rao" in page.text
    assert "Due:" in page.text

    bad = auth_client.post(f"/app/booked/{booking.id}/payment", data={"amount": "-3"}, follow_redirects=False)
    assert "error=" in location(bad)
    db.expire_all()
    assert db.query(Payment).count() == 1

    ok = auth_client.post(f"/app/booked/{booking.id}/payment", data={"amount": "200"}, follow_redirects=False)
    assert "msg=" in location(ok)
    db.expire_all()
    assert db.query(Payment).filter(Payment.payment_type == PaymentType.EXTENSION).count() == 1

    auth_client.post(f"/app/booked/{booking.id}/rent", data={"rent_per_day": "800"})
    db.expire_all()
    assert float(db.get(Booking, booking.id).rent_per_day) == 800


def test_shop_purchase_and_checkout(auth_client, db):
    add_room(auth_client)
    room_id = only_room(db).id
    check_in(auth_client, room_id)
    booking = db.query(Booking).one()
    auth_client.post("/app/shop/items", data={"item_name": "Soap", "quantity": "5", "price": "30"})
    item = db.query(InventoryItem).one()

    assert auth_client.get("/app/shop/").status_code == 200

    short = auth_client.post(
        "/app/shop/purchase",
        data={"booking_id": str(booking.id), f"qty_{item.id}": "9", "payment_status": "pending"},
        follow_redirects=False,
    )
    assert "error=Insufficient" in location(short)
    db.expire_all()
    assert db.get(InventoryItem, item.id).quantity == 5

    auth_client.post(
        "/app/shop/purchase",
        data={"booking_id": str(booking.id), f"qty_{item.id}": "5", "payment_status": "pending"},
    )
    db.expire_all()
    assert db.get(InventoryItem, item.id).quantity == 0

    preview = auth_client.get(f"/app/checkout/?booking_id={booking.id}")
    assert preview.status_code == 200
    assert "Soap" in preview.text

    invoice = auth_client.get(f"/app/checkout/{booking.id}/invoice.pdf")
    assert invoice.status_code == 200
    assert invoice.headers["content-type"] == "application/pdf"
    assert invoice.content.startswith(b"%PDF")

    done = auth_client.post(f"/app/checkout/{booking.id}", follow_redirects=False)
    assert "msg=Checkout+completed" in location(done)
    db.expire_all()
    assert db.get(Room, room_id).status == RoomStatus.CLEANING
    assert db.query(Purchase).one().payment_status == PurchaseStatus.PAID

    closed = auth_client.get(f"/app/checkout/{booking.id}/invoice.pdf", follow_redirects=False)
    assert closed.status_code == 303
    assert "error=Invoices+are+issued+before+checkout" in location(closed)

    auth_client.post(f"/app/rooms/{room_id}/cleaning", data={"is_clean": "no"})
    db.expire_all()
    assert db.get(Room, room_id).status == RoomStatus.CLEANING

    auth_client.post(f"/app/rooms/{room_id}/cleaning", data={"is_clean": "yes"})
    db.expire_all()
    assert db.get(Room, room_id).status == RoomStatus.AVAILABLE


def test_payments_log_and_csv_export(auth_client, db):
    add_room(auth_client)
    check_in(auth_client, only_room(db).id)

    page = auth_client.get("/app/payments/")
    assert page.status_code == 200
    assert "Asha Rao" in page.text

    export = auth_client.get("/app/payments/export.csv")
    assert export.status_code == 200
    assert export.headers["content-type"].startswith("text/csv")
    rows = list(csv.reader(StringIO(export.text)))
    assert rows[0] == ["Payment ID", "Date", "Room", "Guest", "Type", "Amount"]
    assert rows[1][2:] == ["101", "Asha Rao", "check_in", "500.00"]


def test_label_filter():
    from frontdesk.templating import label_filter

    assert label_filter(PaymentType.CHECK_IN) == "Check In"
    assert label_filter("non-ac") == "Non-Ac"
    assert label_filter(None) == ""
