# marshal_checkin/settings.py
from __future__ import annotations
from pydantic import BaseModel, Field

class CheckInConfig(BaseModel):
    radius_m: float = 100.0                   # GPS check-in acceptance radius
    allow_manual: bool = True

class StorageConfig(BaseModel):
    db_path: str = "/data/checkin.db"

class ImportConfig(BaseModel):
    max_rows: int = 5000
    default_encoding: str = "utf-8-sig"       # Excel CSV exports carry a BOM

class LayerConfig(BaseModel):
    proximity_m: float = 25.0                 # checkpoint to route distance for auto layers

class AreaConfig(BaseModel):
    default_area_name: str = "Unassigned"
    default_area_description: str = "Default area for unassigned checkpoints"
    default_area_color: str = "#667eea"

class Observability(BaseModel):
    http_port: int = 8099
    metrics_enabled: bool = True
    service_name: str = "marshal-checkin"
    build_version: str = "0.1.0"
    build_date: str = "2026-01-01"
    log_level: str = "INFO"
    log_json: bool = False

class Settings(BaseModel):
    # sections always present, defaults via factory
    check_in: CheckInConfig = Field(default_factory=CheckInConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    importer: ImportConfig = Field(default_factory=ImportConfig)
    areas: AreaConfig = Field(default_factory=AreaConfig)
    layers: LayerConfig = Field(default_factory=LayerConfig)
    observability: Observability = Field(default_factory=Observability)
