"""Rendering of command results as table, JSON, YAML or CSV on stdout.

:class:`Formatter` accepts a single object or a list of objects (pydantic
models, dataclasses, plain dicts) and writes one complete rendering to a
text sink.

* **JSON** -- 2-space indented, trailing newline, fields in the source
  object's declaration order.
* **YAML** -- block style, same logical data and order as JSON.
* **CSV / table** -- the data is first normalised into *records* (ordered
  ``dict``\\s). Known domain shapes are narrowed to a curated, human-friendly
  field subset through the :data:`RECORD_BUILDERS` dispatch table; anything
  else falls back to every serialisable field. Column order comes from
  :func:`ordered_headers`.

The curated narrowing is intentionally table/CSV-only: ``-o json`` always
shows every field.

Example::

    >>> Formatter("csv").render([{"b": 2, "a": 1}])
    a,b
    1,2
"""

from __future__ import annotations

import csv
import dataclasses
import json
import sys
from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Optional, Protocol, TextIO, Union, runtime_checkable

import yaml
from pydantic import BaseModel
from rich.cells import cell_len

from spacectl.exceptions import ConfigurationError, SerializationError
from spacectl.models import (
    KubernetesVersion,
    Location,
    Organization,
    OrganizationMembership,
    Project,
    ProjectMembership,
    Tenant,
)

NO_DATA = "No data found"

Record = dict[str, Any]


class OutputFormat(str, Enum):
    """Supported ``-o/--output`` values."""

    TABLE = "table"
    JSON = "json"
    YAML = "yaml"
    CSV = "csv"


@runtime_checkable
class SupportsRecord(Protocol):
    """Objects that know their own table/CSV record shape."""

    def to_record(self) -> Mapping[str, Any]: ...


# ------------------------------------------------------------------ #
# Record dispatch table
# ------------------------------------------------------------------ #

RECORD_BUILDERS: dict[type, Callable[[Any], Record]] = {}
"""Curated record builders keyed by domain type. Looked up along the MRO."""


def record_builder(cls: type) -> Callable[[Callable[[Any], Record]], Callable[[Any], Record]]:
    """Register the decorated function as the curated record shape for *cls*."""

    def decorator(func: Callable[[Any], Record]) -> Callable[[Any], Record]:
        RECORD_BUILDERS[cls] = func
        return func

    return decorator


@record_builder(OrganizationMembership)
def _organization_membership_record(item: OrganizationMembership) -> Record:
    return {
        "organization": item.organization.name,
        "role": item.role,
        "is_default": item.is_default,
    }


@record_builder(ProjectMembership)
def _project_membership_record(item: ProjectMembership) -> Record:
    return {"project": item.project.name, "role": item.role}


@record_builder(Organization)
def _organization_record(item: Organization) -> Record:
    return {"id": item.id, "name": item.name}


@record_builder(Project)
def _project_record(item: Project) -> Record:
    return {"id": item.id, "name": item.name, "organization_id": item.organization_id}


@record_builder(Location)
def _location_record(item: Location) -> Record:
    return {"cloud_provider": item.cloud_provider, "region": item.region, "zone": item.zone}


@record_builder(KubernetesVersion)
def _kubernetes_version_record(item: KubernetesVersion) -> Record:
    return {"version": item.version, "is_default": item.is_default}


@record_builder(Tenant)
def _tenant_record(item: Tenant) -> Record:
    return {
        "name": item.name,
        "cloud_provider": item.cloud_provider,
        "region": item.region,
        "kubernetes_version": item.kubernetes_version,
        "compute_quota": item.compute_quota,
        "memory_quota_gb": item.memory_quota_gb,
        "status": item.status,
    }


def to_record(item: Any) -> Record:
    """Convert one object into a record.

    Resolution order: a curated builder registered for the object's type
    (or a base class), then the object's own ``to_record()``, then the
    generic field reflection of :func:`reflect_record`.
    """
    for klass in type(item).__mro__:
        builder = RECORD_BUILDERS.get(klass)
        if builder is not None:
            return builder(item)
    if isinstance(item, SupportsRecord):
        return dict(item.to_record())
    return reflect_record(item)


def reflect_record(item: Any) -> Record:
    """Return every serialisable field of *item* keyed by its serialised name.

    Pydantic fields marked ``exclude=True`` are skipped, as are dataclass
    fields whose names start with an underscore.

    Raises:
        SerializationError: If *item* is not a mapping, model or dataclass.
    """
    if isinstance(item, Mapping):
        return {str(key): value for key, value in item.items()}
    if isinstance(item, BaseModel):
        record: Record = {}
        for name, field in type(item).model_fields.items():
            if field.exclude:
                continue
            key = field.serialization_alias or field.alias or name
            record[key] = getattr(item, name)
        return record
    if dataclasses.is_dataclass(item) and not isinstance(item, type):
        return {
            field.name: getattr(item, field.name)
            for field in dataclasses.fields(item)
            if not field.name.startswith("_")
        }
    raise SerializationError(
        f"unsupported data type for table/CSV formatting: {type(item).__name__}"
    )


def to_records(data: Any) -> list[Record]:
    """Normalise a single object, a list/tuple of objects, or ``None`` into records."""
    if data is None:
        return []
    if isinstance(data, (list, tuple)):
        return [to_record(item) for item in data]
    return [to_record(data)]


_PREFERRED_ORDERS: tuple[tuple[str, ...], ...] = (
    ("organization", "role", "is_default"),
    ("cloud_provider", "region", "zone"),
    ("version", "is_default"),
    (
        "project",
        "name",
        "cloud_provider",
        "region",
        "kubernetes_version",
        "compute_quota",
        "memory_quota_gb",
        "status",
    ),
    (
        "name",
        "cloud_provider",
        "region",
        "kubernetes_version",
        "compute_quota",
        "memory_quota_gb",
        "status",
    ),
)


def ordered_headers(record: Mapping[str, Any]) -> list[str]:
    """Return the column order for records shaped like *record*.

    A record containing every key of a preferred order (organization
    membership, location, Kubernetes version, tenant, tenant-in-project)
    gets exactly those columns in that order; the first match wins.
    Anything else gets all of its keys sorted alphabetically.
    """
    for order in _PREFERRED_ORDERS:
        if all(key in record for key in order):
            return list(order)
    return sorted(record)


# ------------------------------------------------------------------ #
# Formatter
# ------------------------------------------------------------------ #


class Formatter:
    """Render results in one output format.

    The format and header flag are fixed at construction; :meth:`render`
    keeps no state between calls, so one instance can render any number of
    results.

    Args:
        format: One of ``table``, ``json``, ``yaml``, ``csv``.
        no_headers: Omit the header row in table and CSV output.
        sink: Text stream to write to. Defaults to the current
            ``sys.stdout`` at render time.

    Raises:
        ConfigurationError: If *format* is not supported.
    """

    def __init__(
        self,
        format: Union[str, OutputFormat] = OutputFormat.TABLE,
        no_headers: bool = False,
        sink: Optional[TextIO] = None,
    ) -> None:
        try:
            self._format = OutputFormat(format)
        except ValueError:
            supported = ", ".join(f.value for f in OutputFormat)
            raise ConfigurationError(
                f"unsupported output format: {format!r} (expected one of: {supported})"
            ) from None
        self._no_headers = no_headers
        self._sink = sink

    @property
    def format(self) -> OutputFormat:
        return self._format

    def render(self, data: Any) -> None:
        """Write one complete rendering of *data* to the sink.

        Raises:
            SerializationError: If *data* contains values that cannot be
                represented in the selected format.
        """
        sink = self._sink if self._sink is not None else sys.stdout
        if self._format is OutputFormat.JSON:
            self._render_json(data, sink)
        elif self._format is OutputFormat.YAML:
            self._render_yaml(data, sink)
        elif self._format is OutputFormat.CSV:
            self._render_csv(data, sink)
        else:
            self._render_table(data, sink)
        sink.flush()

    # ------------------------------------------------------------------ #
    # Renderers
    # ------------------------------------------------------------------ #

    def _render_json(self, data: Any, sink: TextIO) -> None:
        try:
            text = json.dumps(to_plain(data), indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise SerializationError(f"Failed to encode output as JSON: {exc}") from exc
        sink.write(text + "\n")

    def _render_yaml(self, data: Any, sink: TextIO) -> None:
        try:
            text = yaml.safe_dump(
                to_plain(data),
                sort_keys=False,
                default_flow_style=False,
                allow_unicode=True,
            )
        except yaml.YAMLError as exc:
            raise SerializationError(f"Failed to encode output as YAML: {exc}") from exc
        sink.write(text)

    def _render_csv(self, data: Any, sink: TextIO) -> None:
        records = to_records(data)
        if not records:
            return
        headers = ordered_headers(records[0])
        writer = csv.writer(sink, lineterminator="\n")
        if not self._no_headers:
            writer.writerow(headers)
        for record in records:
            writer.writerow([stringify(record.get(header)) for header in headers])

    def _render_table(self, data: Any, sink: TextIO) -> None:
        records = to_records(data)
        if not records:
            sink.write(f"{NO_DATA}\n")
            return
        headers = ordered_headers(records[0])
        lines = [[stringify(record.get(header)) for header in headers] for record in records]
        if not self._no_headers:
            lines.insert(0, [title_case(header) for header in headers])

        widths = [max(cell_len(line[i]) for line in lines) for i in range(len(headers))]
        for line in lines:
            cells = [cell + " " * (width - cell_len(cell)) for cell, width in zip(line, widths)]
            sink.write("\t".join(cells).rstrip() + "\n")


def render(
    format: Union[str, OutputFormat],
    no_headers: bool,
    data: Any,
    sink: Optional[TextIO] = None,
) -> None:
    """Render *data* once with a throwaway :class:`Formatter`."""
    Formatter(format, no_headers, sink).render(data)


# ------------------------------------------------------------------ #
# Value conversion helpers
# ------------------------------------------------------------------ #


def title_case(key: str) -> str:
    """Turn a field name into a column header: ``is_default`` -> ``Is Default``."""
    return key.replace("_", " ").title()


def stringify(value: Any) -> str:
    """Convert a record value to the text shown in a table or CSV cell."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (BaseModel, Mapping, list, tuple)):
        return json.dumps(to_plain(value), ensure_ascii=False, separators=(",", ":"))
    return str(value)


def to_plain(data: Any) -> Any:
    """Convert *data* into JSON-compatible builtins, preserving field order."""
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True)
    if isinstance(data, Mapping):
        return {str(key): to_plain(value) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [to_plain(item) for item in data]
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        return {
            field.name: to_plain(getattr(data, field.name))
            for field in dataclasses.fields(data)
            if not field.name.startswith("_")
        }
    if isinstance(data, Enum):
        return data.value
    if isinstance(data, (datetime, date)):
        return data.isoformat()
    return data
