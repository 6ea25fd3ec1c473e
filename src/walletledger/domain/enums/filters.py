from enum import Enum


class SpamMode(str, Enum):
    OFF = "off"
    SOFT = "soft"
    HARD = "hard"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
