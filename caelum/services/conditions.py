"""Classification of Open-Meteo WMO weather codes."""

from ..models.weather import Condition, ConditionKind

_CODE_GROUPS = (
    ((0, 1), ConditionKind.CLEAR, "Clear sky"),
    ((2, 3), ConditionKind.CLOUDS, "Cloudy"),
    ((51, 53, 55, 61, 63, 65), ConditionKind.RAIN, "Rain"),
    ((80, 81, 82), ConditionKind.RAIN, "Heavy showers"),
    ((95, 96, 99), ConditionKind.THUNDERSTORM, "Thunderstorm"),
    ((71, 73, 75, 77), ConditionKind.SNOW, "Snow"),
    ((45, 48), ConditionKind.MIST, "Mist"),
)

_CODE_TABLE: dict[int, Condition] = {
    code: Condition(kind=kind, description=description)
    for codes, kind, description in _CODE_GROUPS
    for code in codes
}

UNKNOWN = Condition(kind=ConditionKind.UNKNOWN, description="Uncertain sky")


def classify(code: int) -> Condition:
    """Map a provider weather code to a condition.

    Total over all integers: codes outside the table map to UNKNOWN.
    """
    return _CODE_TABLE.get(code, UNKNOWN)
