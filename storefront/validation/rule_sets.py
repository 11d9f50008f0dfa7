"""
Rule sets, keyed per logical operation (``entity.operation``).

Create and update shapes of the same entity differ in which fields are
required, so each operation has its own entry.
"""

from typing import Dict

from storefront.schemas.catalog import (
    CategoryCreate,
    CategoryUpdate,
    ProductCreate,
    ProductUpdate,
    ReviewCreate,
    ReviewUpdate,
)
from storefront.schemas.query import PaginationQuery, ProductFilterQuery
from storefront.schemas.role import RoleCreate, RoleUpdate
from storefront.schemas.user import (
    ChangePassword,
    ForgotPassword,
    LogoutRequest,
    RefreshRequest,
    ResetPassword,
    UpdateProfile,
    UserCreate,
    UserLogin,
    UserRegister,
    UserUpdate,
)
from storefront.validation.rules import RuleSet, boolean, integer, number, text, uri_list

PHONE_PATTERN = r"^[0-9+\-\s()]+$"
PRODUCT_STATUSES = ("active", "inactive", "draft")
SORT_ORDERS = ("ASC", "DESC", "asc", "desc")
PRODUCT_SORT_COLUMNS = ("created_at", "name", "price", "average_rating", "stock_quantity")

EMAIL_MESSAGES = {
    "email": "Email must be a valid email address",
    "required": "Email is required",
}
PASSWORD_MESSAGES = {
    "min_length": "Password must be at least 6 characters",
    "required": "Password is required",
}
FULL_NAME_MESSAGES = {
    "min_length": "Full name must be at least 2 characters",
    "max_length": "Full name must be less than 255 characters",
    "required": "Full name is required",
}
PHONE_MESSAGES = {
    "pattern": "Phone number format is invalid",
}


# ============================================
# User
# ============================================

def _user_fields(required: bool):
    return [
        text("email", required=required, email=True, messages=EMAIL_MESSAGES),
        text("password", required=required, min_length=6, messages=PASSWORD_MESSAGES),
        text("full_name", required=required, min_length=2, max_length=255, messages=FULL_NAME_MESSAGES),
        text("phone", pattern=PHONE_PATTERN, min_length=10, max_length=20, messages=PHONE_MESSAGES),
        text("address", max_length=500),
    ]


USER_REGISTER = RuleSet("user.register", UserRegister, _user_fields(required=True))

USER_CREATE = RuleSet(
    "user.create",
    UserCreate,
    _user_fields(required=True) + [integer("role_id", positive=True)],
)

USER_UPDATE = RuleSet(
    "user.update",
    UserUpdate,
    _user_fields(required=False) + [
        integer("role_id", positive=True),
        boolean("is_active"),
    ],
)

USER_LOGIN = RuleSet("user.login", UserLogin, [
    text("email", required=True, email=True, messages=EMAIL_MESSAGES),
    text("password", required=True, messages={"required": "Password is required"}),
])

USER_FORGOT_PASSWORD = RuleSet("user.forgot_password", ForgotPassword, [
    text("email", required=True, email=True, messages=EMAIL_MESSAGES),
])

USER_RESET_PASSWORD = RuleSet("user.reset_password", ResetPassword, [
    text("token", required=True),
    text("password", required=True, min_length=6, messages=PASSWORD_MESSAGES),
])

USER_UPDATE_PROFILE = RuleSet(
    "user.update_profile",
    UpdateProfile,
    [
        text("full_name", min_length=2, max_length=255, messages=FULL_NAME_MESSAGES),
        text("phone", pattern=PHONE_PATTERN, min_length=10, max_length=20, messages=PHONE_MESSAGES),
        text("address", max_length=500),
    ],
    allow_blank=("phone", "address"),
)

USER_CHANGE_PASSWORD = RuleSet("user.change_password", ChangePassword, [
    text("current_password", required=True),
    text("new_password", required=True, min_length=6),
    text(
        "confirm_password",
        required=True,
        matches="new_password",
        messages={"matches": "Confirm password must match new password"},
    ),
])


AUTH_REFRESH = RuleSet("auth.refresh", RefreshRequest, [
    text("refresh_token", required=True),
])

AUTH_LOGOUT = RuleSet("auth.logout", LogoutRequest, [
    text("refresh_token"),
])


# ============================================
# Role
# ============================================

ROLE_CREATE = RuleSet("role.create", RoleCreate, [
    text("name", required=True, min_length=2, max_length=50),
    text("description", max_length=255),
])

ROLE_UPDATE = RuleSet("role.update", RoleUpdate, [
    text("name", min_length=2, max_length=50),
    text("description", max_length=255),
])


# ============================================
# Catalog
# ============================================

def _product_fields(create: bool):
    return [
        text("name", required=create, min_length=2, max_length=255),
        text("description"),
        text("short_description", max_length=500),
        number("price", required=create, positive=True),
        number("sale_price", positive=True),
        text("sku", max_length=100),
        integer("stock_quantity", minimum=0),
        integer("category_id", required=create, positive=True),
        text("featured_image", uri=True),
        uri_list("gallery"),
        text("status", choices=PRODUCT_STATUSES),
        boolean("is_featured"),
        text("meta_title", max_length=255),
        text("meta_description", max_length=500),
    ]


PRODUCT_CREATE = RuleSet("product.create", ProductCreate, _product_fields(create=True))
PRODUCT_UPDATE = RuleSet("product.update", ProductUpdate, _product_fields(create=False))


def _category_fields(create: bool):
    return [
        text("name", required=create, min_length=2, max_length=255),
        text("description"),
        text("image", uri=True),
        integer("parent_id", positive=True),
        integer("sort_order", minimum=0),
        boolean("is_active"),
    ]


CATEGORY_CREATE = RuleSet("category.create", CategoryCreate, _category_fields(create=True))
CATEGORY_UPDATE = RuleSet("category.update", CategoryUpdate, _category_fields(create=False))


def _review_fields(create: bool):
    return [
        integer("rating", required=create, minimum=1, maximum=5),
        text("title", max_length=255),
        text("comment", max_length=1000),
    ]


REVIEW_CREATE = RuleSet(
    "review.create",
    ReviewCreate,
    [integer("product_id", required=True, positive=True)] + _review_fields(create=True),
)
REVIEW_UPDATE = RuleSet("review.update", ReviewUpdate, _review_fields(create=False))


# ============================================
# Query strings
# ============================================

def _pagination_fields():
    return [
        integer("page", minimum=1),
        integer("limit", minimum=1, maximum=100),
        text("search", max_length=255),
    ]


QUERY_PAGINATION = RuleSet("query.pagination", PaginationQuery, _pagination_fields() + [
    text("sort_by"),
    text("sort_order", choices=SORT_ORDERS),
])

QUERY_PRODUCT_FILTER = RuleSet("query.product_filter", ProductFilterQuery, _pagination_fields() + [
    integer("category_id", positive=True),
    text("category_slug"),
    text("status", choices=PRODUCT_STATUSES),
    boolean("is_featured"),
    text("sort_by", choices=PRODUCT_SORT_COLUMNS),
    text("sort_order", choices=SORT_ORDERS),
    number("min_price", minimum=0),
    number("max_price", minimum=0),
])


RULE_SETS: Dict[str, RuleSet] = {
    rule_set.name: rule_set
    for rule_set in (
        USER_REGISTER,
        USER_CREATE,
        USER_UPDATE,
        USER_LOGIN,
        USER_FORGOT_PASSWORD,
        USER_RESET_PASSWORD,
        USER_UPDATE_PROFILE,
        USER_CHANGE_PASSWORD,
        AUTH_REFRESH,
        AUTH_LOGOUT,
        ROLE_CREATE,
        ROLE_UPDATE,
        PRODUCT_CREATE,
        PRODUCT_UPDATE,
        CATEGORY_CREATE,
        CATEGORY_UPDATE,
        REVIEW_CREATE,
        REVIEW_UPDATE,
        QUERY_PAGINATION,
        QUERY_PRODUCT_FILTER,
    )
}
