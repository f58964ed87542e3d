"""Custom path convertors.

Importing this module registers them with Starlette, so it must be
imported before any route using them is declared.
"""

from starlette.convertors import Convertor, register_url_convertor


class DigitsConvertor(Convertor[str]):
    """Match one or more decimal digits, keeping the value as text.

    Unlike ``int``, leading zeros survive (``/users/007`` keeps ``"007"``).
    """

    regex = "[0-9]+"

    def convert(self, value: str) -> str:
        return value

    def to_string(self, value: str) -> str:
        return value


register_url_convertor("digits", DigitsConvertor())
