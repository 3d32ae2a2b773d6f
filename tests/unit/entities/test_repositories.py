"""Tests for entity repositories against an in-memory database."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from src.unieats.entities.core.user import User, UserRepository, UserRole
from src.unieats.entities.service.order import (
    Order,
    OrderItem,
    OrderRepository,
    OrderStatus,
)
from src.unieats.entities.service.restaurant import (
    MenuItem,
    Restaurant,
    RestaurantRepository,
)


def _user(subject: str, role: UserRole = UserRole.CUSTOMER) -> User:
    return User(
        external_subject_id=subject,
        email=f"{subject}@campus.edu",
        display_name=subject.title(),
        role=role,
    )


class TestUserRepository:
    """Test user persistence."""

    def test_create_and_lookup(self, session):
        repo = UserRepository(session)

        created = repo.create(_user("jane"))

        assert repo.get(created.id) == created
        assert repo.get_by_external_subject_id("jane") == created
        assert repo.get_by_external_subject_id("nobody") is None

    def test_subject_id_is_unique(self, session):
        repo = UserRepository(session)
        repo.create(_user("jane"))

        with pytest.raises(IntegrityError):
            repo.create(_user("jane"))

    def test_update_profile_keeps_identity(self, session):
        repo = UserRepository(session)
        created = repo.create(_user("jane"))
        later = datetime.now(UTC) + timedelta(minutes=5)

        updated = repo.update_profile(
            created.id,
            email="new@campus.edu",
            display_name="Jane New",
            updated_at=later,
        )

        assert updated.id == created.id
        assert updated.external_subject_id == "jane"
        assert updated.email == "new@campus.edu"
        assert updated.display_name == "Jane New"

    def test_update_missing_user_raises(self, session):
        with pytest.raises(ValueError):
            UserRepository(session).update_profile(
                "missing", email="x@campus.edu", display_name="X", updated_at=datetime.now(UTC)
            )

    def test_public_view(self):
        user = _user("jane", role=UserRole.DRIVER)

        assert user.public_view() == {
            "id": user.id,
            "name": "Jane",
            "email": "jane@campus.edu",
            "role": "driver",
        }


class TestRestaurantRepository:
    """Test restaurant persistence and menus."""

    def test_menu_round_trips(self, session):
        repo = RestaurantRepository(session)
        menu = [
            MenuItem(item_name="Falafel Wrap", description="With tahini", price=7.5),
            MenuItem(item_name="Fries", price=3.0),
        ]

        created = repo.create(
            Restaurant(name="Campus Grill", address="1 College Ave", menu=menu)
        )

        loaded = repo.get(created.id)
        assert loaded.menu == menu
        assert repo.get("missing") is None

    def test_list_is_sorted_by_name(self, session):
        repo = RestaurantRepository(session)
        repo.create(Restaurant(name="Taco Stand", address="2 Quad"))
        repo.create(Restaurant(name="Bagel Barn", address="3 Library Rd"))

        assert [r.name for r in repo.list_all()] == ["Bagel Barn", "Taco Stand"]

    def test_negative_price_rejected(self):
        with pytest.raises(ValueError):
            MenuItem(item_name="Refund", price=-1)


class TestOrderRepository:
    """Test order persistence and visibility."""

    @pytest.fixture
    def people(self, session):
        users = UserRepository(session)
        customer = users.create(_user("customer"))
        driver = users.create(_user("driver", role=UserRole.DRIVER))
        restaurant = RestaurantRepository(session).create(
            Restaurant(name="Campus Grill", address="1 College Ave")
        )
        return customer, driver, restaurant

    def _order(self, customer, restaurant, driver=None, **kwargs) -> Order:
        return Order(
            customer_id=customer.id,
            driver_id=driver.id if driver else None,
            restaurant_id=restaurant.id,
            items=[OrderItem(item_name="Fries", price=3.0, quantity=2)],
            total_price=6.0,
            delivery_address="Dorm B, Room 12",
            **kwargs,
        )

    def test_create_defaults_to_placed(self, session, people):
        customer, _, restaurant = people
        repo = OrderRepository(session)

        created = repo.create(self._order(customer, restaurant))

        loaded = repo.get(created.id)
        assert loaded.status == OrderStatus.PLACED
        assert loaded.items == [OrderItem(item_name="Fries", price=3.0, quantity=2)]

    def test_list_for_customer_newest_first(self, session, people):
        customer, _, restaurant = people
        repo = OrderRepository(session)
        base = datetime(2024, 9, 1, tzinfo=UTC)
        older = repo.create(self._order(customer, restaurant, created_at=base))
        newer = repo.create(
            self._order(customer, restaurant, created_at=base + timedelta(hours=1))
        )

        assert [o.id for o in repo.list_for_customer(customer.id)] == [
            newer.id,
            older.id,
        ]

    def test_list_for_participant_includes_deliveries(self, session, people):
        customer, driver, restaurant = people
        repo = OrderRepository(session)
        delivering = repo.create(
            self._order(customer, restaurant, driver=driver, status=OrderStatus.ACCEPTED)
        )
        repo.create(self._order(customer, restaurant))

        assert [o.id for o in repo.list_for_participant(driver.id)] == [delivering.id]
        assert len(repo.list_for_participant(customer.id)) == 2
        assert repo.list_for_customer(driver.id) == []

    def test_visibility(self, people):
        customer, driver, restaurant = people
        order = self._order(customer, restaurant, driver=driver)

        assert order.is_visible_to(customer.id)
        assert order.is_visible_to(driver.id)
        assert not order.is_visible_to("stranger")

    def test_status_values(self):
        assert [s.value for s in OrderStatus] == [
            "placed",
            "accepted",
            "picked-up",
            "delivered",
        ]
