"""Identifier types shared by models and routes"""
import re
import secrets

from sqlalchemy import TypeDecorator, String
from starlette.convertors import Convertor, register_url_convertor

OBJECT_ID_LENGTH = 24
OBJECT_ID_PATTERN = r"[0-9a-fA-F]{24}"
_OBJECT_ID_RE = re.compile(rf"^{OBJECT_ID_PATTERN}$")


def generate_object_id() -> str:
    """Generate a 24-character hexadecimal identifier"""
    return secrets.token_hex(OBJECT_ID_LENGTH // 2)


def is_object_id(value: str) -> bool:
    return isinstance(value, str) and bool(_OBJECT_ID_RE.match(value))


class ObjectIdType(TypeDecorator):
    """24-char hex identifier stored as VARCHAR(24), always lowercase"""
    impl = String(OBJECT_ID_LENGTH)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value).lower()
        return value

    def process_result_value(self, value, dialect):
        if value is not None:
            return str(value)
        return value


class ObjectIdConvertor(Convertor):
    """Route convertor: paths with a malformed id simply do not match"""
    regex = OBJECT_ID_PATTERN

    def convert(self, value: str) -> str:
        return value.lower()

    def to_string(self, value: str) -> str:
        return str(value)


register_url_convertor("objectid", ObjectIdConvertor())
