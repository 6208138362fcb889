"""Render service descriptors as systemd unit files.

Layout of a rendered unit:

    [Unit]
    <unit keys in document order>

    [Service]
    <known directives in schema order>
    <other directives in document order>
    Environment=<NAME=value, in document order>

    [Install]
    <install keys in document order>

Sections without keys are left out. Lists are written as the same key
repeated once per element. Strings are copied verbatim and integers are
written in decimal; nothing else is accepted.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, List, Tuple

from ..exceptions import InvalidFieldValue
from ..models.service import FieldKind, Pairs, ServiceDescriptor
from ..utils.constants import UNIT_EXTENSION

logger = logging.getLogger(__name__)

KEY_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9]*$")
ENV_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
ENV_QUOTE_CHARS = re.compile(r'[\s"\\\']')


@dataclass(frozen=True)
class RenderedUnit:
    """A unit file ready to be written.

    Attributes:
        name: Descriptor name
        filename: Unit filename (e.g., 'web.service')
        text: Unit file content
    """

    name: str
    filename: str
    text: str


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, tuple):
        return "list"
    if hasattr(value, "keys"):
        return "mapping"
    return type(value).__name__


def _is_integer(value: Any) -> bool:
    # bool is an int subclass but never a valid integer directive
    return isinstance(value, int) and not isinstance(value, bool)


class UnitRenderer:
    """Transforms ServiceDescriptors into systemd unit text."""

    def __init__(self, extension: str = UNIT_EXTENSION):
        self.extension = extension

    def render(self, descriptor: ServiceDescriptor) -> RenderedUnit:
        """Render a descriptor into a unit file.

        Args:
            descriptor: Descriptor to render

        Returns:
            RenderedUnit with filename and text

        Raises:
            InvalidFieldValue: If any field does not match its expected type
        """
        sections = [
            ("Unit", self._render_free_form(descriptor, "unit", descriptor.unit)),
            ("Service", self._render_service(descriptor)),
            ("Install", self._render_free_form(descriptor, "install", descriptor.install)),
        ]

        blocks = []
        for header, lines in sections:
            if lines:
                blocks.append("\n".join([f"[{header}]"] + lines))

        if not blocks:
            logger.warning(f"Descriptor '{descriptor.name}' has no keys, rendering an empty unit")

        text = "\n\n".join(blocks) + "\n" if blocks else ""
        filename = f"{descriptor.name}.{self.extension}"
        logger.debug(f"Rendered {filename} ({len(text)} bytes)")
        return RenderedUnit(name=descriptor.name, filename=filename, text=text)

    def _render_service(self, descriptor: ServiceDescriptor) -> List[str]:
        lines = []

        for directive, kind, value in descriptor.service.present():
            values = self._check_kind(descriptor, directive, kind, value)
            lines.extend(f"{directive}={item}" for item in values)

        lines.extend(self._render_free_form(descriptor, "service", descriptor.service.extra))
        lines.extend(self._render_environment(descriptor))
        return lines

    def _render_free_form(self, descriptor: ServiceDescriptor, section: str, pairs: Pairs) -> List[str]:
        lines = []
        for key, value in pairs:
            # [Service] directives are named bare, other sections are prefixed
            field = key if section == "service" else f"{section}.{key}"
            if not isinstance(key, str) or not KEY_PATTERN.match(key):
                raise InvalidFieldValue(descriptor.name, field, "not a valid directive name")

            items = value if isinstance(value, tuple) else (value,)
            for item in items:
                if not (isinstance(item, str) or _is_integer(item)):
                    raise InvalidFieldValue(
                        descriptor.name, field,
                        f"expected string, integer or list of those, got {_type_name(item)}"
                    )
                lines.append(f"{key}={self._format_scalar(descriptor, field, item)}")
        return lines

    def _render_environment(self, descriptor: ServiceDescriptor) -> List[str]:
        lines = []
        for name, value in descriptor.environment:
            if not isinstance(name, str) or not ENV_NAME_PATTERN.match(name):
                raise InvalidFieldValue(descriptor.name, f"environment.{name}", "not a valid variable name")

            if not (isinstance(value, str) or _is_integer(value)):
                raise InvalidFieldValue(
                    descriptor.name, f"environment.{name}",
                    f"expected string or integer, got {_type_name(value)}"
                )

            assignment = f"{name}={self._format_scalar(descriptor, f'environment.{name}', value)}"
            if ENV_QUOTE_CHARS.search(assignment):
                escaped = assignment.replace("\\", "\\\\").replace('"', '\\"')
                assignment = f'"{escaped}"'
            lines.append(f"Environment={assignment}")
        return lines

    def _check_kind(self, descriptor: ServiceDescriptor, directive: str, kind: FieldKind, value: Any) -> Tuple[str, ...]:
        """Validate a known directive and return its rendered values."""
        if kind.is_list:
            if not isinstance(value, tuple):
                raise InvalidFieldValue(
                    descriptor.name, directive, f"expected {kind.value}, got {_type_name(value)}"
                )
            items = value
        else:
            items = (value,)

        wants_integer = kind in (FieldKind.INTEGER, FieldKind.INTEGER_LIST)
        for item in items:
            valid = _is_integer(item) if wants_integer else isinstance(item, str)
            if not valid:
                raise InvalidFieldValue(
                    descriptor.name, directive, f"expected {kind.value}, got {_type_name(item)}"
                )

        return tuple(self._format_scalar(descriptor, directive, item) for item in items)

    @staticmethod
    def _format_scalar(descriptor: ServiceDescriptor, field: str, value: Any) -> str:
        if _is_integer(value):
            return str(value)
        if "\n" in value or "\r" in value:
            raise InvalidFieldValue(descriptor.name, field, "value must not contain line breaks")
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise InvalidFieldValue(descriptor.name, field, f"value is not valid UTF-8 text ({e.reason})") from e
        return value
