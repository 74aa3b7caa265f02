"""Common schema base classes and validators"""

import re
from typing import Annotated

from pydantic import AfterValidator, BaseModel
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

SPECIAL_CHARACTERS = r"""!@#$%^&*(),.?":{}|<>"""

PASSWORD_RULES = [
    (lambda p: len(p) >= 8, "Password must be at least 8 characters long"),
    (lambda p: re.search(r"[A-Z]", p) is not None, "Password must contain at least one uppercase letter"),
    (lambda p: re.search(r"[a-z]", p) is not None, "Password must contain at least one lowercase letter"),
    (lambda p: re.search(r"[0-9]", p) is not None, "Password must contain at least one number"),
    (
        lambda p: any(c in SPECIAL_CHARACTERS for c in p),
        "Password must contain at least one special character",
    ),
]


def password_rule_failures(password: str) -> list[str]:
    """Messages for every complexity rule the password breaks"""
    return [message for check, message in PASSWORD_RULES if not check(password)]


def check_password_complexity(password: str) -> str:
    failures = password_rule_failures(password)
    if failures:
        # The validation handler lists each rule in `errors`
        raise PydanticCustomError(
            "password_complexity",
            "Password does not meet complexity requirements",
            {"rules": failures},
        )
    return password


StrongPassword = Annotated[str, AfterValidator(check_password_complexity)]


class CamelModel(BaseModel):
    """Base schema exposing camelCase field names on the wire"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
