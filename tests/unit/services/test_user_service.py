"""
Unit Tests for UserService
"""
from unittest.mock import AsyncMock, patch

import pytest
from faker import Faker
from sqlalchemy.exc import IntegrityError, OperationalError

from storefront.core.types import generate_object_id, is_object_id
from storefront.repositories.user_repository import UserRepository
from storefront.services.base import classify_integrity_error
from storefront.services.category_service import CategoryService
from storefront.services.product_service import ProductService
from storefront.services.review_service import ReviewService
from storefront.services.user_service import UserService

fake = Faker()


def user_payload(**overrides):
    payload = {
        'email': fake.unique.email(),
        'password': 'secret123',
        'full_name': fake.name(),
    }
    payload.update(overrides)
    return payload


class TestCreateUser:

    @pytest.mark.asyncio
    async def test_create_and_fetch_round_trip(self, db_session, roles):
        service = UserService(db_session)
        payload = user_payload(phone='+1 555 0100 200')

        created = await service.create_new_user(payload)

        assert created.success is True
        assert created.message == 'User created successfully'
        assert is_object_id(created.data.id)
        assert created.data.role_name == 'customer'

        fetched = await service.get_user_by_id(created.data.id)
        assert fetched.success is True
        assert fetched.data.email == payload['email'].lower()
        assert fetched.data.full_name == payload['full_name']
        assert fetched.data.phone == '+1 555 0100 200'

    @pytest.mark.asyncio
    async def test_password_is_hashed(self, db_session, roles):
        service = UserService(db_session)
        created = await service.create_new_user(user_payload())

        user = await UserRepository(db_session).find_by_id(created.data.id)
        assert user.hashed_password != 'secret123'
        assert user.hashed_password.startswith('$2')

    @pytest.mark.asyncio
    async def test_duplicate_email_writes_nothing(self, db_session, test_user):
        service = UserService(db_session)

        result = await service.create_new_user(user_payload(email=test_user.email.upper()))

        assert result.success is False
        assert result.error == 'DUPLICATE_EMAIL'
        assert result.message == 'Email already exists'
        assert await UserRepository(db_session).count_by() == 1

    @pytest.mark.asyncio
    async def test_lost_race_surfaces_as_duplicate_email(self, db_session, test_user):
        """The unique index catches what the advisory check missed"""
        service = UserService(db_session)

        with patch.object(service.users, 'find_by_email', AsyncMock(return_value=None)):
            result = await service.create_new_user(user_payload(email=test_user.email))

        assert result.success is False
        assert result.error == 'DUPLICATE_EMAIL'
        assert await UserRepository(db_session).count_by() == 1

    @pytest.mark.asyncio
    async def test_default_role_recreated_when_missing(self, db_session):
        service = UserService(db_session)

        result = await service.create_new_user(user_payload())

        assert result.success is True
        assert result.data.role_name == 'customer'

    @pytest.mark.asyncio
    async def test_unknown_role_rejected(self, db_session, roles):
        service = UserService(db_session)

        result = await service.create_new_user(user_payload(role_id=999))

        assert result.success is False
        assert result.error == 'ROLE_NOT_FOUND'


class TestReadUsers:

    @pytest.mark.asyncio
    async def test_get_is_idempotent(self, db_session, test_user):
        service = UserService(db_session)

        first = await service.get_user_by_id(test_user.id)
        second = await service.get_user_by_id(test_user.id)

        assert first.data == second.data

    @pytest.mark.asyncio
    async def test_unknown_id_not_found(self, db_session, roles):
        result = await UserService(db_session).get_user_by_id(generate_object_id())

        assert result.success is False
        assert result.error == 'USER_NOT_FOUND'
        assert result.message == 'User not found'
        assert result.data is None

    @pytest.mark.asyncio
    async def test_list_newest_first(self, db_session, roles):
        service = UserService(db_session)
        first = await service.create_new_user(user_payload())
        second = await service.create_new_user(user_payload())

        result = await service.get_all_users()

        assert result.message == 'Users retrieved successfully'
        ids = [user.id for user in result.data]
        assert set(ids) == {first.data.id, second.data.id}

    @pytest.mark.asyncio
    async def test_paged_listing_with_search(self, db_session, roles):
        service = UserService(db_session)
        await service.create_new_user(user_payload(full_name='Ada Lovelace'))
        await service.create_new_user(user_payload(full_name='Alan Turing'))
        await service.create_new_user(user_payload(full_name='Grace Hopper'))

        result = await service.list_users_page({'page': 1, 'limit': 10, 'search': 'a'})
        narrowed = await service.list_users_page({'page': 1, 'limit': 1, 'search': 'turing'})

        assert result.data['pagination']['total_records'] == 3
        assert [user.full_name for user in narrowed.data['items']] == ['Alan Turing']
        assert narrowed.data['pagination']['total_pages'] == 1


class TestUpdateUser:

    @pytest.mark.asyncio
    async def test_update_returns_post_update_record(self, db_session, test_user):
        service = UserService(db_session)

        result = await service.update_user(test_user.id, {'full_name': 'Renamed User'})

        assert result.success is True
        assert result.message == 'User updated successfully'
        assert result.data.full_name == 'Renamed User'
        assert result.data.email == test_user.email

    @pytest.mark.asyncio
    async def test_email_taken_by_other_user(self, db_session, test_user, admin_user):
        result = await UserService(db_session).update_user(test_user.id, {'email': admin_user.email})

        assert result.error == 'DUPLICATE_EMAIL'

    @pytest.mark.asyncio
    async def test_update_missing_user(self, db_session, roles):
        result = await UserService(db_session).update_user(generate_object_id(), {'full_name': 'Nobody'})

        assert result.error == 'USER_NOT_FOUND'


class TestDeleteUser:

    @pytest.mark.asyncio
    async def test_delete_then_get(self, db_session, test_user):
        service = UserService(db_session)

        deleted = await service.delete_user(test_user.id)
        assert deleted.success is True
        assert deleted.message == 'User deleted successfully'
        assert deleted.data is None

        fetched = await service.get_user_by_id(test_user.id)
        assert fetched.error == 'USER_NOT_FOUND'

    @pytest.mark.asyncio
    async def test_cannot_delete_self(self, db_session, admin_user):
        result = await UserService(db_session).delete_user(admin_user.id, acting_user_id=admin_user.id)

        assert result.success is False
        assert result.error == 'VALIDATION_FAILURE'

    @pytest.mark.asyncio
    async def test_delete_missing_user(self, db_session, roles):
        result = await UserService(db_session).delete_user(generate_object_id())

        assert result.error == 'USER_NOT_FOUND'

    @pytest.mark.asyncio
    async def test_delete_refreshes_ratings_of_reviewed_products(self, db_session, test_user, admin_user):
        category = await CategoryService(db_session).create_category({'name': 'Lamps'})
        product = await ProductService(db_session).create_product(
            {'name': 'Desk Lamp', 'price': 25.0, 'category_id': category.data.id}
        )
        reviews = ReviewService(db_session)
        await reviews.create_review(test_user.id, {'product_id': product.data.id, 'rating': 1})
        await reviews.create_review(admin_user.id, {'product_id': product.data.id, 'rating': 5})

        before = await ProductService(db_session).get_product(str(product.data.id))
        await UserService(db_session).delete_user(test_user.id)
        after = await ProductService(db_session).get_product(str(product.data.id))

        assert before.data.average_rating == 3.0
        assert after.data.average_rating == 5.0


class TestStoreFailures:

    @pytest.mark.asyncio
    async def test_store_error_hides_raw_message(self, db_session):
        service = UserService(db_session)
        failure = OperationalError('SELECT * FROM users', {}, Exception('disk I/O error at /var/lib/db'))

        with patch.object(service.users, 'list_newest_first', AsyncMock(side_effect=failure)):
            result = await service.get_all_users()

        assert result.success is False
        assert result.error == 'STORE_ERROR'
        assert result.message == 'Failed to retrieve users'
        assert 'disk' not in result.message

    @pytest.mark.parametrize('raw, code', [
        ('UNIQUE constraint failed: users.email', 'DUPLICATE_EMAIL'),
        ("Duplicate entry 'ABC-1' for key 'products.sku'", 'DUPLICATE_SKU'),
        ('UNIQUE constraint failed: roles.name', 'DUPLICATE_ROLE'),
        ('NOT NULL constraint failed: products.price', 'VALIDATION_FAILURE'),
    ])
    def test_integrity_errors_are_classified(self, raw, code):
        _, classified = classify_integrity_error(IntegrityError('INSERT', {}, Exception(raw)))

        assert classified == code
