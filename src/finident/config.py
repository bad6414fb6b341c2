from __future__ import annotations

from pathlib import Path
from typing import List, Literal, Optional
import yaml
from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


# ---- Input limits ----
class Limits(BaseModel):
    max_input_length: int = Field(default=64, ge=1)  # raw characters, before canonicalization


# ---- Rule packs (toggle and extend without code changes) ----
class Packs(BaseModel):
    iban: bool = True               # IBAN + derived BBAN registry
    national_id: bool = True        # personal identity / tax numbers
    vat: bool = True                # VAT registration numbers
    bank_routing: bool = True       # ABA, CLABE, CBU
    payment_reference: bool = True  # local structured references (BE, FI, NO, SE)
    extra: List[Path] = Field(default_factory=list)  # additional YAML packs


# ---- Root config ----
class FinidentConfig(BaseModel):
    limits: Limits = Field(default_factory=Limits)
    packs: Packs = Field(default_factory=Packs)
    log_level: LogLevel = "WARNING"


# ---- Loader ----
def load_config(path: Optional[Path]) -> FinidentConfig:
    if not path:
        return FinidentConfig()
    data = yaml.safe_load(Path(path).read_text()) or {}
    return FinidentConfig(**data)
