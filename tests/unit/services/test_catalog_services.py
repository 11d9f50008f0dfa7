"""
Unit Tests for the catalog services: categories, products and reviews
"""
import pytest

from storefront.services.category_service import CategoryService
from storefront.services.product_service import ProductService
from storefront.services.review_service import ReviewService


async def make_category(db_session, name='Office Supplies', **extra):
    result = await CategoryService(db_session).create_category({'name': name, **extra})
    assert result.success, result.message
    return result.data


async def make_product(db_session, category_id, name='Desk Lamp', **extra):
    payload = {'name': name, 'price': 25.0, 'category_id': category_id, **extra}
    result = await ProductService(db_session).create_product(payload)
    assert result.success, result.message
    return result.data


class TestCategoryService:

    @pytest.mark.asyncio
    async def test_slug_is_generated_and_deduplicated(self, db_session):
        first = await make_category(db_session, 'Café Tables')
        second = await make_category(db_session, 'Cafe Tables')

        assert first.slug == 'cafe-tables'
        assert second.slug == 'cafe-tables-1'

    @pytest.mark.asyncio
    async def test_lookup_by_slug_or_id(self, db_session):
        category = await make_category(db_session)
        service = CategoryService(db_session)

        by_slug = await service.get_category(category.slug)
        by_id = await service.get_category(str(category.id))

        assert by_slug.data.id == by_id.data.id == category.id

    @pytest.mark.asyncio
    async def test_child_reports_parent_name(self, db_session):
        parent = await make_category(db_session, 'Furniture')
        child = await make_category(db_session, 'Chairs', parent_id=parent.id)

        assert child.parent_id == parent.id
        assert child.parent_name == 'Furniture'

    @pytest.mark.asyncio
    async def test_missing_parent(self, db_session):
        result = await CategoryService(db_session).create_category({'name': 'Orphans', 'parent_id': 42})

        assert result.error == 'CATEGORY_NOT_FOUND'

    @pytest.mark.asyncio
    async def test_cannot_be_own_parent(self, db_session):
        category = await make_category(db_session)

        result = await CategoryService(db_session).update_category(category.id, {'parent_id': category.id})

        assert result.success is False
        assert result.message == 'Category cannot be its own parent'

    @pytest.mark.asyncio
    async def test_delete_refused_while_products_remain(self, db_session):
        category = await make_category(db_session)
        await make_product(db_session, category.id)

        result = await CategoryService(db_session).delete_category(category.id)

        assert result.error == 'CATEGORY_IN_USE'
        assert result.message == 'Cannot delete category that has products'

    @pytest.mark.asyncio
    async def test_delete_refused_while_children_remain(self, db_session):
        parent = await make_category(db_session, 'Furniture')
        await make_category(db_session, 'Chairs', parent_id=parent.id)

        result = await CategoryService(db_session).delete_category(parent.id)

        assert result.message == 'Cannot delete category that has children'

    @pytest.mark.asyncio
    async def test_delete_is_soft(self, db_session):
        category = await make_category(db_session)
        service = CategoryService(db_session)

        result = await service.delete_category(category.id)
        active = await service.list_categories()
        everything = await service.list_categories(include_inactive=True)

        assert result.success is True
        assert active.data == []
        assert [c.id for c in everything.data] == [category.id]
        assert everything.data[0].is_active is False

    @pytest.mark.asyncio
    async def test_slug_transliterates_non_latin_names(self, db_session):
        category = await make_category(db_session, 'Điện thoại & Máy tính')

        assert category.slug == 'dien-thoai-may-tinh'

    @pytest.mark.asyncio
    async def test_non_ascii_digits_are_not_ids(self, db_session):
        await make_category(db_session)

        result = await CategoryService(db_session).get_category('²')

        assert result.error == 'CATEGORY_NOT_FOUND'

    @pytest.mark.asyncio
    async def test_inactive_category_hidden_unless_requested(self, db_session):
        category = await make_category(db_session, is_active=False)
        service = CategoryService(db_session)

        hidden = await service.get_category(category.slug)
        shown = await service.get_category(category.slug, include_inactive=True)

        assert hidden.error == 'CATEGORY_NOT_FOUND'
        assert shown.data.id == category.id

    @pytest.mark.asyncio
    async def test_cannot_move_under_own_descendant(self, db_session):
        top = await make_category(db_session, 'Furniture')
        middle = await make_category(db_session, 'Chairs', parent_id=top.id)
        bottom = await make_category(db_session, 'Office Chairs', parent_id=middle.id)
        service = CategoryService(db_session)

        direct = await service.update_category(top.id, {'parent_id': middle.id})
        deep = await service.update_category(top.id, {'parent_id': bottom.id})

        assert direct.success is False
        assert direct.error == 'VALIDATION_FAILURE'
        assert deep.message == 'Category cannot be moved under one of its own subcategories'

    @pytest.mark.asyncio
    async def test_moving_to_sibling_branch_is_allowed(self, db_session):
        furniture = await make_category(db_session, 'Furniture')
        lighting = await make_category(db_session, 'Lighting')
        chairs = await make_category(db_session, 'Chairs', parent_id=furniture.id)

        result = await CategoryService(db_session).update_category(chairs.id, {'parent_id': lighting.id})

        assert result.data.parent_id == lighting.id

    @pytest.mark.asyncio
    async def test_paged_listing_searches(self, db_session):
        await make_category(db_session, 'Desk Lamps')
        await make_category(db_session, 'Floor Lamps')
        await make_category(db_session, 'Chairs')

        result = await CategoryService(db_session).list_categories_page(
            {'page': 1, 'limit': 1, 'search': 'lamps', 'sort_by': 'name', 'sort_order': 'ASC'}
        )

        assert [c.name for c in result.data['items']] == ['Desk Lamps']
        assert result.data['pagination']['total_records'] == 2
        assert result.data['pagination']['has_next'] is True

    @pytest.mark.asyncio
    async def test_tree_nests_active_children(self, db_session):
        furniture = await make_category(db_session, 'Furniture', sort_order=1)
        await make_category(db_session, 'Chairs', parent_id=furniture.id)
        await make_category(db_session, 'Lighting', sort_order=0)
        await make_category(db_session, 'Retired', is_active=False)

        result = await CategoryService(db_session).category_tree()

        assert [node.name for node in result.data] == ['Lighting', 'Furniture']
        assert [child.name for child in result.data[1].children] == ['Chairs']
        assert result.data[0].children == []

    @pytest.mark.asyncio
    async def test_roots_and_children(self, db_session):
        furniture = await make_category(db_session, 'Furniture')
        await make_category(db_session, 'Chairs', parent_id=furniture.id)
        await make_category(db_session, 'Stools', parent_id=furniture.id, is_active=False)
        service = CategoryService(db_session)

        roots = await service.root_categories()
        children = await service.child_categories(furniture.id)
        all_children = await service.child_categories(furniture.id, include_inactive=True)

        assert [c.name for c in roots.data] == ['Furniture']
        assert [c.name for c in children.data] == ['Chairs']
        assert [c.name for c in all_children.data] == ['Chairs', 'Stools']

    @pytest.mark.asyncio
    async def test_reorder(self, db_session):
        first = await make_category(db_session, 'Furniture', sort_order=0)
        second = await make_category(db_session, 'Lighting', sort_order=1)

        result = await CategoryService(db_session).reorder_categories([
            {'id': first.id, 'sort_order': 5},
            {'id': second.id, 'sort_order': 0},
        ])

        assert [(c.name, c.sort_order) for c in result.data] == [('Lighting', 0), ('Furniture', 5)]

    @pytest.mark.asyncio
    async def test_reorder_with_unknown_id_writes_nothing(self, db_session):
        category = await make_category(db_session, sort_order=3)
        service = CategoryService(db_session)

        result = await service.reorder_categories([
            {'id': category.id, 'sort_order': 9},
            {'id': 404, 'sort_order': 0},
        ])
        unchanged = await service.get_category(str(category.id))

        assert result.error == 'CATEGORY_NOT_FOUND'
        assert unchanged.data.sort_order == 3


class TestProductService:

    @pytest.mark.asyncio
    async def test_create_applies_defaults(self, db_session):
        category = await make_category(db_session)

        product = await make_product(db_session, category.id, sku='LAMP-1')

        assert product.slug == 'desk-lamp'
        assert product.stock_quantity == 0
        assert product.status == 'active'
        assert product.category_name == 'Office Supplies'
        assert product.final_price == 25.0
        assert product.discount_percentage == 0

    @pytest.mark.asyncio
    async def test_sale_price_discount(self, db_session):
        category = await make_category(db_session)

        product = await make_product(db_session, category.id, sale_price=20.0)

        assert product.final_price == 20.0
        assert product.discount_percentage == 20

    @pytest.mark.asyncio
    async def test_duplicate_sku(self, db_session):
        category = await make_category(db_session)
        await make_product(db_session, category.id, sku='LAMP-1')

        result = await ProductService(db_session).create_product(
            {'name': 'Floor Lamp', 'price': 40.0, 'category_id': category.id, 'sku': 'LAMP-1'}
        )

        assert result.success is False
        assert result.error == 'DUPLICATE_SKU'
        assert result.message == 'SKU already exists'

    @pytest.mark.asyncio
    async def test_inactive_category_rejected(self, db_session):
        category = await make_category(db_session, is_active=False)

        result = await ProductService(db_session).create_product(
            {'name': 'Desk Lamp', 'price': 25.0, 'category_id': category.id}
        )

        assert result.error == 'CATEGORY_NOT_FOUND'

    @pytest.mark.asyncio
    async def test_detail_by_slug_counts_views(self, db_session):
        category = await make_category(db_session)
        product = await make_product(db_session, category.id)
        service = ProductService(db_session)

        await service.get_product(product.slug)
        second = await service.get_product(str(product.id))

        assert second.data.view_count == 2

    @pytest.mark.asyncio
    async def test_listing_filters_and_paginates(self, db_session):
        category = await make_category(db_session)
        for index in range(5):
            await make_product(db_session, category.id, name=f'Lamp {index}', price=10.0 + index)

        result = await ProductService(db_session).list_products(
            {'page': 2, 'limit': 2, 'min_price': 11, 'sort_by': 'price', 'sort_order': 'ASC'}
        )

        page = result.data
        assert [item.price for item in page['items']] == [13.0, 14.0]
        assert page['pagination'] == {
            'current_page': 2,
            'total_pages': 2,
            'total_records': 4,
            'limit': 2,
            'has_next': False,
            'has_prev': True,
        }

    @pytest.mark.asyncio
    async def test_stock_operations(self, db_session):
        category = await make_category(db_session)
        product = await make_product(db_session, category.id, stock_quantity=5)
        service = ProductService(db_session)

        added = await service.update_stock(product.id, 3, 'add')
        assert added.data.stock_quantity == 8

        refused = await service.update_stock(product.id, 10, 'subtract')
        assert refused.success is False
        assert refused.message == 'Stock quantity cannot be negative'

    @pytest.mark.asyncio
    async def test_search_documents(self, db_session):
        category = await make_category(db_session)
        await make_product(db_session, category.id)

        result = await ProductService(db_session).search_documents()

        assert result.data[0].category_slug == 'office-supplies'

    @pytest.mark.asyncio
    async def test_non_ascii_digits_are_not_ids(self, db_session):
        category = await make_category(db_session)
        await make_product(db_session, category.id)

        result = await ProductService(db_session).get_product('²')

        assert result.success is False
        assert result.error == 'PRODUCT_NOT_FOUND'

    @pytest.mark.asyncio
    async def test_draft_hidden_from_public_listing_and_detail(self, db_session):
        category = await make_category(db_session)
        await make_product(db_session, category.id, name='Live Lamp')
        draft = await make_product(db_session, category.id, name='Draft Lamp', status='draft')
        service = ProductService(db_session)

        public = await service.list_products({'status': 'draft'})
        admin = await service.list_products({'status': 'draft'}, include_hidden=True)
        hidden = await service.get_product(str(draft.id))
        shown = await service.get_product(draft.slug, include_hidden=True)

        assert [item.name for item in public.data['items']] == ['Live Lamp']
        assert [item.name for item in admin.data['items']] == ['Draft Lamp']
        assert hidden.error == 'PRODUCT_NOT_FOUND'
        assert shown.data.view_count == 1

    @pytest.mark.asyncio
    async def test_featured_and_latest_skip_hidden(self, db_session):
        category = await make_category(db_session)
        await make_product(db_session, category.id, name='Plain Lamp')
        await make_product(db_session, category.id, name='Star Lamp', is_featured=True)
        await make_product(db_session, category.id, name='Secret Lamp', is_featured=True, status='inactive')
        service = ProductService(db_session)

        featured = await service.featured_products()
        latest = await service.latest_products(limit=5)

        assert [p.name for p in featured.data] == ['Star Lamp']
        assert [p.name for p in latest.data] == ['Star Lamp', 'Plain Lamp']

    @pytest.mark.asyncio
    async def test_related_stays_in_category(self, db_session):
        lamps = await make_category(db_session, 'Lamps')
        chairs = await make_category(db_session, 'Chairs')
        product = await make_product(db_session, lamps.id, name='Desk Lamp')
        await make_product(db_session, lamps.id, name='Floor Lamp')
        await make_product(db_session, lamps.id, name='Draft Lamp', status='draft')
        await make_product(db_session, chairs.id, name='Stool')

        result = await ProductService(db_session).related_products(product.id)

        assert [p.name for p in result.data] == ['Floor Lamp']

    @pytest.mark.asyncio
    async def test_low_stock(self, db_session):
        category = await make_category(db_session)
        await make_product(db_session, category.id, name='Plenty', stock_quantity=50)
        await make_product(db_session, category.id, name='Scarce', stock_quantity=2)
        await make_product(db_session, category.id, name='Gone', stock_quantity=0)
        service = ProductService(db_session)

        default = await service.low_stock_products()
        strict = await service.low_stock_products(threshold=1)

        assert default.data['threshold'] == 10
        assert [p.name for p in default.data['products']] == ['Gone', 'Scarce']
        assert strict.data['count'] == 1

    @pytest.mark.asyncio
    async def test_stats(self, db_session):
        category = await make_category(db_session)
        await make_product(db_session, category.id, name='A', price=10.0, stock_quantity=100)
        await make_product(db_session, category.id, name='B', price=30.0, stock_quantity=0, is_featured=True)
        await make_product(db_session, category.id, name='C', price=20.0, stock_quantity=100, status='draft')

        result = await ProductService(db_session).product_stats()

        stats = result.data['stats']
        assert stats['total_products'] == 3
        assert stats['active_products'] == 2
        assert stats['draft_products'] == 1
        assert stats['featured_products'] == 1
        assert stats['out_of_stock'] == 1
        assert stats['low_stock'] == 1
        assert stats['average_price'] == 20.0
        assert stats['max_price'] == 30.0
        assert result.data['category_distribution'] == [
            {'id': category.id, 'name': 'Office Supplies', 'product_count': 2},
        ]
        assert {p.name for p in result.data['recent_products']} == {'A', 'B'}

    @pytest.mark.asyncio
    async def test_bulk_update(self, db_session):
        lamps = await make_category(db_session, 'Lamps')
        sale = await make_category(db_session, 'Sale')
        first = await make_product(db_session, lamps.id, name='Desk Lamp')
        second = await make_product(db_session, lamps.id, name='Floor Lamp')

        result = await ProductService(db_session).bulk_update_products(
            [first.id, second.id], {'status': 'inactive', 'category_id': sale.id, 'is_featured': None}
        )

        assert result.message == '2 products updated successfully'
        assert result.data['updated'] == 2
        assert {(p.status, p.category_name, p.is_featured) for p in result.data['products']} == {
            ('inactive', 'Sale', False),
        }

    @pytest.mark.asyncio
    async def test_bulk_update_is_all_or_nothing(self, db_session):
        category = await make_category(db_session)
        product = await make_product(db_session, category.id)
        service = ProductService(db_session)

        missing = await service.bulk_update_products([product.id, 404], {'is_featured': True})
        empty = await service.bulk_update_products([product.id], {})
        unchanged = await service.get_product(str(product.id))

        assert missing.error == 'PRODUCT_NOT_FOUND'
        assert empty.message == 'Update data is required'
        assert unchanged.data.is_featured is False


class TestReviewService:

    @pytest.mark.asyncio
    async def test_rating_follows_reviews(self, db_session, test_user, admin_user):
        category = await make_category(db_session)
        product = await make_product(db_session, category.id)
        service = ReviewService(db_session)

        await service.create_review(test_user.id, {'product_id': product.id, 'rating': 5})
        second = await service.create_review(admin_user.id, {'product_id': product.id, 'rating': 2})

        detail = await ProductService(db_session).get_product(str(product.id))
        assert detail.data.average_rating == 3.5

        await service.delete_review(second.data.id, admin_user.id)
        detail = await ProductService(db_session).get_product(str(product.id))
        assert detail.data.average_rating == 5.0

    @pytest.mark.asyncio
    async def test_only_author_may_modify(self, db_session, test_user, admin_user):
        category = await make_category(db_session)
        product = await make_product(db_session, category.id)
        service = ReviewService(db_session)
        review = await service.create_review(test_user.id, {'product_id': product.id, 'rating': 4})

        result = await service.update_review(review.data.id, admin_user.id, {'rating': 1})

        assert result.success is False
        assert result.error == 'NOT_AUTHORIZED'

    @pytest.mark.asyncio
    async def test_review_for_missing_product(self, db_session, test_user):
        result = await ReviewService(db_session).create_review(test_user.id, {'product_id': 99, 'rating': 4})

        assert result.error == 'PRODUCT_NOT_FOUND'

    @pytest.mark.asyncio
    async def test_listing_is_paginated(self, db_session, test_user, admin_user):
        category = await make_category(db_session)
        product = await make_product(db_session, category.id)
        service = ReviewService(db_session)
        await service.create_review(test_user.id, {'product_id': product.id, 'rating': 2})
        await service.create_review(admin_user.id, {'product_id': product.id, 'rating': 5})

        result = await service.list_reviews(product.id, {'page': 1, 'limit': 1, 'sort_by': 'rating'})

        assert [review.rating for review in result.data['items']] == [5]
        assert result.data['pagination']['total_records'] == 2

    @pytest.mark.asyncio
    async def test_listing_for_missing_product(self, db_session):
        result = await ReviewService(db_session).list_reviews(99)

        assert result.error == 'PRODUCT_NOT_FOUND'
