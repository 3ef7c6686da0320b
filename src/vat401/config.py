from __future__ import annotations

import os
from importlib.resources import files
from pathlib import Path

import platformdirs
import yaml
from dotenv import load_dotenv

from vat401.models.company import CompanyProfile
from vat401.models.tax_code import TaxCode
from vat401.services.classifier import MappingTaxCodeProvider

APP_NAME = "vat401"


def _checkout_dir(subdir: str) -> Path | None:
    """Return <checkout>/<subdir> when running from a source tree that has it."""
    # src/vat401/config.py sits three levels below the checkout
    candidate = Path(__file__).resolve().parents[2] / subdir
    return candidate if candidate.is_dir() else None


def _resolve_config_dir_for_dotenv() -> Path | None:
    """Locate the directory whose .env holds the VAT401_* settings.

    VAT401_CONFIG_DIR counts only when set in the real environment, since the
    .env file cannot point at itself. Returns None when no config dir exists yet.
    """
    from_env = os.environ.get("VAT401_CONFIG_DIR")
    if from_env:
        return Path(from_env)
    checkout = _checkout_dir("config")
    if checkout is not None:
        return checkout
    user_dir = Path(platformdirs.user_config_dir(APP_NAME))
    return user_dir if user_dir.is_dir() else None


# A .env in the working directory wins; the config dir's .env only fills gaps
load_dotenv()
_cfg_dir = _resolve_config_dir_for_dotenv()
if _cfg_dir is not None:
    load_dotenv(_cfg_dir / ".env")


def _resolve_dir(env_var: str, default_subdir: str, kind: str) -> Path:
    """Pick the config or data directory for filings.

    *env_var* overrides everything, then a checkout's own config/ or data/,
    then the per-user platform directory for *kind*.
    """
    from_env = os.environ.get(env_var)
    if from_env:
        return Path(from_env)
    checkout = _checkout_dir(default_subdir)
    if checkout is not None:
        return checkout
    if kind == "config":
        return Path(platformdirs.user_config_dir(APP_NAME))
    return Path(platformdirs.user_data_dir(APP_NAME))


def get_config_dir() -> Path:
    """Where company.yaml and tax_codes.yaml live (looked up on every call)."""
    return _resolve_dir("VAT401_CONFIG_DIR", "config", kind="config")


def get_data_dir() -> Path:
    """Root for generated output (looked up on every call)."""
    return _resolve_dir("VAT401_DATA_DIR", "data", kind="data")


def get_output_dir() -> Path:
    """Directory where generated media files are written."""
    return get_data_dir() / "media"


def get_log_level() -> str:
    return os.environ.get("VAT401_LOG_LEVEL", "WARNING").upper()


# --- YAML config ---


def load_yaml(path: Path) -> dict:
    """Load and parse a YAML file, returning the top-level dict."""
    return yaml.safe_load(path.read_text(encoding="utf-8")) or {}


def load_company() -> CompanyProfile:
    """Load the filing company from config/company.yaml."""
    return CompanyProfile.from_dict(load_yaml(get_config_dir() / "company.yaml"))


def parse_tax_codes(data: dict) -> MappingTaxCodeProvider:
    """Build a tax-code table from a {code: {tax_type, is_deductible, ...}} mapping."""
    codes = data.get("tax_codes", data)
    return MappingTaxCodeProvider(
        {str(code): TaxCode.from_dict(str(code), entry) for code, entry in codes.items()}
    )


def load_tax_codes() -> MappingTaxCodeProvider:
    """Load config/tax_codes.yaml, falling back to the bundled default table."""
    path = get_config_dir() / "tax_codes.yaml"
    if path.is_file():
        return parse_tax_codes(load_yaml(path))
    bundled = files("vat401") / "templates" / "tax_codes.yaml"
    return parse_tax_codes(yaml.safe_load(bundled.read_text(encoding="utf-8")))
