"""
Checkpoint and marshal import for the marshal check-in service.

This module reads the spreadsheets organisers already keep (CSV or
XLSX), detects the columns by header name and produces checkpoint and
marshal rows. Row problems are collected as messages instead of
aborting the import.
"""

import csv
import io
import os
import uuid
from typing import Iterable, List, Optional, Sequence
import openpyxl
from pydantic import BaseModel, Field
from marshal_checkin.common.geo import validate_coordinates
from marshal_checkin.common.sanitize import (
    sanitize_description, sanitize_email, sanitize_name, sanitize_phone, sanitize_what3words,
)
from marshal_checkin.core.models import Assignment, Location, Marshal
from marshal_checkin.core.names import expand_marshal_names
from marshal_checkin.features.area_assignment import recalculate_location_areas
from marshal_checkin.ports.repository import EventStorePort
from marshal_checkin.features.layer_assignment import recalculate_layer_assignments
from marshal_checkin.settings import AreaConfig, ImportConfig, LayerConfig
from marshal_checkin.observability import metrics
from marshal_checkin.observability.logging_setup import get_logger

log = get_logger("checkin.import")

LABEL_HEADERS = ("Label", "Name", "Checkpoint", "Position")
DESCRIPTION_HEADERS = ("Description", "Detail", "Details", "")
LATITUDE_HEADERS = ("Lat", "Latitude", "Lat (Optional)", "Latitude (Optional)")
LONGITUDE_HEADERS = ("Long", "Longitude", "Lon", "Long (Optional)",
                     "Longitude (Optional)", "Lon (Optional)")
MARSHALS_HEADERS = ("Marshal*", "People*")
WHAT3WORDS_HEADERS = ("What3Words*", "W3W*")

class CheckpointRow(BaseModel):
    """Checkpoint parsed from an import file"""
    name: str
    description: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    has_lat_long: bool = False
    marshal_names: List[str] = Field(default_factory=list)
    what3words: str = ""

class MarshalRow(BaseModel):
    """Marshal parsed from an import file"""
    name: str
    email: str = ""
    phone: str = ""
    checkpoint: str = ""

class CheckpointImportResult(BaseModel):
    checkpoints: List[CheckpointRow] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)

class MarshalImportResult(BaseModel):
    marshals: List[MarshalRow] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)

def find_column_index(headers: Sequence[str], *aliases: str) -> int:
    """
    Find a column by any of its accepted header names.

    Matching ignores case and spaces. An alias ending in ``*`` matches
    any header starting with it, e.g. ``Marshal*`` matches
    ``"Marshal(s) 2026"``.

    Args:
        headers: header row
        *aliases: accepted names

    Returns:
        Column index, or -1 when absent
    """
    for i, header in enumerate(headers):
        compact = (header or "").replace(" ", "").lower()
        for alias in aliases:
            wanted = alias.replace(" ", "").lower()
            if compact == wanted:
                return i
            if wanted.endswith("*") and compact.startswith(wanted[:-1]):
                return i
    return -1

def _cell(row: Sequence[str], index: int) -> str:
    if index < 0 or index >= len(row):
        return ""
    return (row[index] or "").strip().strip('"').strip()

def _parse_float(text: str) -> Optional[float]:
    try:
        return float(text)
    except ValueError:
        return None

def parse_checkpoint_rows(rows: Iterable[Sequence[str]], max_rows: int) -> CheckpointImportResult:
    """
    Parse checkpoint rows, the first row being the header.

    Args:
        rows: table rows as strings
        max_rows: rows beyond this count are reported and ignored

    Returns:
        Parsed checkpoints and per-row error messages
    """
    result = CheckpointImportResult()
    iterator = iter(rows)

    headers = next(iterator, None)
    if not headers or not any((h or "").strip() for h in headers):
        result.errors.append("CSV file is empty")
        return result

    headers = [(h or "").strip().strip('"') for h in headers]
    label_idx = find_column_index(headers, *LABEL_HEADERS)
    description_idx = find_column_index(headers, *DESCRIPTION_HEADERS)
    lat_idx = find_column_index(headers, *LATITUDE_HEADERS)
    lon_idx = find_column_index(headers, *LONGITUDE_HEADERS)
    marshals_idx = find_column_index(headers, *MARSHALS_HEADERS)
    w3w_idx = find_column_index(headers, *WHAT3WORDS_HEADERS)

    if label_idx == -1:
        result.errors.append("Missing required column: Label")
        return result

    for row_number, row in enumerate(iterator, start=2):
        if not any((c or "").strip() for c in row):
            continue
        if len(result.checkpoints) >= max_rows:
            result.errors.append(f"Row {row_number}: row limit of {max_rows} reached, remaining rows ignored")
            break

        if len(row) <= label_idx:
            result.errors.append(f"Row {row_number}: Insufficient columns")
            continue

        name = sanitize_name(_cell(row, label_idx))
        if not name:
            result.errors.append(f"Row {row_number}: Label is empty")
            continue

        lat_text = _cell(row, lat_idx)
        lon_text = _cell(row, lon_idx)
        latitude = longitude = 0.0

        if lat_text:
            parsed = _parse_float(lat_text)
            if parsed is None or not validate_coordinates(parsed, 0.0):
                result.errors.append(f"Row {row_number}: Invalid latitude value '{lat_text}'")
                continue
            latitude = parsed

        if lon_text:
            parsed = _parse_float(lon_text)
            if parsed is None or not validate_coordinates(0.0, parsed):
                result.errors.append(f"Row {row_number}: Invalid longitude value '{lon_text}'")
                continue
            longitude = parsed

        what3words = ""
        w3w_text = _cell(row, w3w_idx)
        if w3w_text:
            what3words = sanitize_what3words(w3w_text) or ""
            if not what3words:
                log.warning(f"Row {row_number}: ignoring invalid what3words '{w3w_text}'")

        result.checkpoints.append(CheckpointRow(
            name=name,
            description=sanitize_description(_cell(row, description_idx)),
            latitude=latitude,
            longitude=longitude,
            has_lat_long=bool(lat_text and lon_text),
            marshal_names=expand_marshal_names(_cell(row, marshals_idx)),
            what3words=what3words,
        ))

    return result

def parse_checkpoints_csv(text: str, config: Optional[ImportConfig] = None) -> CheckpointImportResult:
    """
    Parse a checkpoint CSV document.

    Args:
        text: CSV content
        config: row limit

    Returns:
        Import result
    """
    reader = csv.reader(io.StringIO(text.strip()), skipinitialspace=True)
    config = config or ImportConfig()
    result = parse_checkpoint_rows(reader, max_rows=config.max_rows)
    _record(result, "csv")
    return result

def _xlsx_rows(path: str) -> List[List[str]]:
    wb = openpyxl.load_workbook(path, data_only=True, read_only=True)
    try:
        ws = wb.active
        return [
            ["" if v is None else str(v) for v in row]
            for row in ws.iter_rows(values_only=True)
        ]
    finally:
        wb.close()

def load_checkpoints(path: str, config: Optional[ImportConfig] = None) -> CheckpointImportResult:
    """
    Load checkpoints from a CSV or XLSX file.

    Args:
        path: file path
        config: row limit and CSV text encoding

    Returns:
        Import result

    Raises:
        ValueError: unsupported file extension
    """
    config = config or ImportConfig()
    ext = os.path.splitext(path)[1].lower()

    if ext == ".csv":
        with open(path, newline="", encoding=config.default_encoding) as f:
            return parse_checkpoints_csv(f.read(), config)

    if ext == ".xlsx":
        result = parse_checkpoint_rows(_xlsx_rows(path), max_rows=config.max_rows)
        _record(result, "xlsx")
        return result

    raise ValueError(f"Unsupported file type: {ext or path}")

def parse_marshals_csv(text: str) -> MarshalImportResult:
    """
    Parse a marshal CSV document (Name, Email, Phone, Checkpoint).

    Args:
        text: CSV content

    Returns:
        Parsed marshals and per-row error messages
    """
    result = MarshalImportResult()
    reader = csv.reader(io.StringIO(text.strip()), skipinitialspace=True)

    headers = next(reader, None)
    if not headers or not any(h.strip() for h in headers):
        result.errors.append("CSV file is empty")
        return result

    headers = [h.strip().strip('"') for h in headers]
    name_idx = find_column_index(headers, "Name")
    email_idx = find_column_index(headers, "Email", "Email (optional)")
    phone_idx = find_column_index(headers, "Phone", "Phone (optional)",
                                  "Phone Number", "Phone Number (optional)")
    checkpoint_idx = find_column_index(headers, "Checkpoint", "Checkpoint (optional)",
                                       "Location", "Location (optional)")

    if name_idx == -1:
        result.errors.append("Missing required column: Name")
        return result

    for row_number, row in enumerate(reader, start=2):
        if not any(c.strip() for c in row):
            continue
        if len(row) <= name_idx:
            result.errors.append(f"Row {row_number}: Insufficient columns")
            continue

        name = sanitize_name(_cell(row, name_idx))
        if not name:
            result.errors.append(f"Row {row_number}: Name is empty")
            continue

        result.marshals.append(MarshalRow(
            name=name,
            email=sanitize_email(_cell(row, email_idx)) or "",
            phone=sanitize_phone(_cell(row, phone_idx)),
            checkpoint=sanitize_name(_cell(row, checkpoint_idx)),
        ))

    return result

def _record(result: CheckpointImportResult, source: str) -> None:
    metrics.checkpoints_imported.labels(source=source).inc(len(result.checkpoints))
    if result.errors:
        metrics.import_row_errors.inc(len(result.errors))
    log.info(f"Checkpoint import parsed source:{source} "
             f"rows:{len(result.checkpoints)} errors:{len(result.errors)}")

class SaveSummary(BaseModel):
    locations_created: int = 0
    locations_updated: int = 0
    assignments_created: int = 0
    warnings: List[str] = Field(default_factory=list)

async def save_checkpoints(store: EventStorePort, event_id: str, result: CheckpointImportResult,
                           config: Optional[AreaConfig] = None, *,
                           delete_existing: bool = False,
                           layer_config: Optional[LayerConfig] = None) -> SaveSummary:
    """
    Persist parsed checkpoints and their marshal assignments.

    Checkpoints are matched to existing ones by name, ignoring case. An
    existing checkpoint only takes the fields the row provides, and its
    assignments are replaced when the row lists marshals. Marshals are
    matched by name and created when unknown. Area and route layer
    membership is recalculated once at the end.

    Args:
        store: event store
        event_id: event id
        result: parsed import
        config: default area naming
        delete_existing: remove every checkpoint and assignment of the
            event before importing; marshals are kept
        layer_config: route proximity distance

    Returns:
        Counts of created and updated entities plus coordinate warnings
    """
    summary = SaveSummary()
    if delete_existing:
        removed = await store.delete_locations_by_event(event_id)
        await store.delete_assignments_by_event(event_id)
        log.info(f"Replacing checkpoints for event {event_id}: removed {removed} existing")

    existing = {loc.name.lower(): loc for loc in await store.get_locations_by_event(event_id)}
    marshals = {m.name.lower(): m for m in await store.get_marshals_by_event(event_id)}

    async def marshal_id_for(name: str) -> str:
        marshal = marshals.get(name.lower())
        if marshal is None:
            marshal = Marshal(id=str(uuid.uuid4()), event_id=event_id, name=name)
            await store.upsert_marshal(marshal)
            marshals[name.lower()] = marshal
        return marshal.id

    for row in result.checkpoints:
        location = existing.get(row.name.lower())
        if location is None:
            location = Location(
                id=str(uuid.uuid4()),
                event_id=event_id,
                name=row.name,
                description=row.description,
                latitude=row.latitude,
                longitude=row.longitude,
                what3words=row.what3words,
            )
            summary.locations_created += 1
        else:
            update = {}
            if row.has_lat_long:
                update.update(latitude=row.latitude, longitude=row.longitude)
            if row.what3words:
                update["what3words"] = row.what3words
            if row.description:
                update["description"] = row.description
            location = location.model_copy(update=update)
            if row.marshal_names:
                await store.delete_assignments_for_location(event_id, location.id)
            summary.locations_updated += 1

        await store.upsert_location(location)
        existing[location.name.lower()] = location

        for name in row.marshal_names:
            await store.upsert_assignment(Assignment(
                id=str(uuid.uuid4()),
                event_id=event_id,
                marshal_id=await marshal_id_for(name),
                location_id=location.id,
            ))
            summary.assignments_created += 1

    for location in existing.values():
        if location.latitude == 0 and location.longitude == 0:
            summary.warnings.append(
                f"Warning: Location '{location.name}' has no valid coordinates "
                f"(lat: {location.latitude:g}, long: {location.longitude:g})"
            )

    await recalculate_location_areas(store, event_id, config)
    await recalculate_layer_assignments(store, event_id, layer_config)
    log.info(f"Imported {summary.locations_created} new, updated {summary.locations_updated} "
             f"existing locations, and created {summary.assignments_created} assignments "
             f"for event {event_id}")
    return summary
