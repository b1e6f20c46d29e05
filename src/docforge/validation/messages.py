"""Message template interpolation for validator errors."""

import re
from typing import Any

from docforge.validation.types import ValidatorCall


class MessageInterpolator:
    """Interpolates call values into validator message templates.

    Supports:
    - {name} - Prefixed field path
    - {field} - Field name within the document
    - {param} - Resolved validator parameter
    - {value} - Current field value
    - {kind} - Validator kind
    """

    PATTERN = re.compile(r"\{(?P<key>name|field|param|value|kind)\}")

    def interpolate(self, template: str, call: ValidatorCall) -> str:
        values: dict[str, Any] = {
            "name": call.name,
            "field": call.nested_name,
            "param": call.param,
            "value": call.value,
            "kind": call.kind,
        }

        def replace(match: re.Match) -> str:
            return self._format(values[match.group("key")])

        return self.PATTERN.sub(replace, template)

    def _format(self, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, re.Pattern):
            return value.pattern
        if isinstance(value, (list, tuple)):
            return ", ".join(self._format(v) for v in value)
        return str(value)
