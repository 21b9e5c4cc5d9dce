import re


# Shared by the advisory client validators and the server schema.
NAME_PATTERN = re.compile(r"^[A-Za-z ]+$")
PRODUCT_LINE_PATTERN = re.compile(r"^[A-Z]{2,4}-[0-9]{2,4}$")
ER_CODE_PATTERN = re.compile(r"^ER[0-9]{6}$")
MODEL_NUMBER_PATTERN = re.compile(r"^[A-Z]{2}[0-9]{4}[A-Z]?$")

NAME_MIN, NAME_MAX = 2, 100
PRODUCT_LINE_MIN = 3
DESCRIPTION_MIN, DESCRIPTION_MAX = 10, 500

FIELD_NAMES = ("name", "productLine", "erCode", "description", "modelNumber")

FIELD_LABELS = {
    "name": "Name",
    "productLine": "Product Line",
    "erCode": "ER Code",
    "description": "Description",
    "modelNumber": "Model Number",
}


def matches(pattern: re.Pattern, value: str) -> bool:
    # fullmatch so a trailing newline cannot satisfy "$"
    return pattern.fullmatch(value) is not None
