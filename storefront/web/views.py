"""
HTML for the server-rendered user CRUD demo.

Every interpolated value goes through ``html.escape``.
"""

from html import escape
from typing import Iterable, Optional

from storefront.schemas.user import UserResponse

MESSAGES = {
    "user_created": "User created successfully",
    "user_updated": "User updated successfully",
    "validation_failed": "Please check the highlighted fields",
    "duplicate_email": "Email already exists",
    "user_not_found": "User not found",
    "store_error": "Something went wrong, please try again",
}


def _text(value) -> str:
    return escape("" if value is None else str(value))


def _page(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8">
    <title>{_text(title)}</title>
</head>
<body>
    <nav><a href="/crud">Create user</a> | <a href="/users">All users</a></nav>
    <h1>{_text(title)}</h1>
{body}
</body>
</html>"""


def _notice(success: Optional[str], error: Optional[str]) -> str:
    if success:
        return f'    <p class="alert success">{_text(MESSAGES.get(success, success))}</p>\n'
    if error:
        return f'    <p class="alert error">{_text(MESSAGES.get(error, error))}</p>\n'
    return ""


def _input(name: str, label: str, value=None, kind: str = "text", required: bool = False) -> str:
    flag = " required" if required else ""
    return (
        f'        <label>{_text(label)} '
        f'<input type="{kind}" name="{name}" value="{_text(value)}"{flag}></label><br>\n'
    )


def render_create_form(success: Optional[str] = None, error: Optional[str] = None) -> str:
    body = _notice(success, error) + (
        '    <form method="post" action="/create-user">\n'
        + _input("full_name", "Full name", required=True)
        + _input("email", "Email", kind="email", required=True)
        + _input("password", "Password", kind="password", required=True)
        + _input("phone", "Phone")
        + _input("address", "Address")
        + '        <button type="submit">Create</button>\n'
        '    </form>'
    )
    return _page("CRUD Application", body)


def render_user_list(
    users: Iterable[UserResponse],
    success: Optional[str] = None,
    error: Optional[str] = None,
) -> str:
    rows = "".join(
        f"        <tr><td>{_text(user.full_name)}</td><td>{_text(user.email)}</td>"
        f"<td>{_text(user.phone)}</td><td>{_text(user.address)}</td>"
        f'<td><a href="/edit-user/{_text(user.id)}">Edit</a> '
        f'<button data-id="{_text(user.id)}" class="delete">Delete</button></td></tr>\n'
        for user in users
    )
    if not rows:
        rows = '        <tr><td colspan="5">No users found</td></tr>\n'

    body = _notice(success, error) + (
        "    <table>\n"
        "        <tr><th>Full name</th><th>Email</th><th>Phone</th><th>Address</th><th></th></tr>\n"
        f"{rows}"
        "    </table>\n"
        "    <script>\n"
        "        document.querySelectorAll('button.delete').forEach(function (button) {\n"
        "            button.addEventListener('click', function () {\n"
        "                fetch('/delete-user/' + button.dataset.id, {method: 'DELETE'})\n"
        "                    .then(function () { window.location.reload(); });\n"
        "            });\n"
        "        });\n"
        "    </script>"
    )
    return _page("All Users", body)


def render_edit_form(user: UserResponse, error: Optional[str] = None) -> str:
    body = _notice(None, error) + (
        f'    <form method="post" action="/update-user/{_text(user.id)}">\n'
        + _input("full_name", "Full name", user.full_name, required=True)
        + _input("email", "Email", user.email, kind="email", required=True)
        + _input("phone", "Phone", user.phone)
        + _input("address", "Address", user.address)
        + _input("password", "New password", kind="password")
        + '        <button type="submit">Update</button>\n'
        "    </form>"
    )
    return _page("Update User", body)
