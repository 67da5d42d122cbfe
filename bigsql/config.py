import os
import re
from typing import Dict, List, Optional, Tuple


def _load_env_files(root: Optional[str] = None) -> None:
    """Load simple KEY=VALUE pairs from .env files if present and not already set.

    Supported locations (first found wins for each key):
      - <repo-root>/.env
    """
    if root is None:
        here = os.path.abspath(os.path.dirname(__file__))
        root = os.path.abspath(os.path.join(here, ".."))
    candidates = [os.path.join(root, ".env")]

    def load_file(path: str) -> None:
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if not line or line.startswith("#"):
                        continue
                    if "=" not in line:
                        continue
                    key, val = line.split("=", 1)
                    key = key.strip()
                    val = val.strip().strip('"').strip("'")
                    # Do not override if already present in the environment
                    if key and key not in os.environ:
                        os.environ[key] = val
        except FileNotFoundError:
            return

    for p in candidates:
        load_file(p)


_load_env_files()

DEFAULT_DRIVER = "ODBC Driver 18 for SQL Server"


class Settings:
    """Environment-driven settings for the script runner."""

    # Full connection string (optional). BIGSQL_* wins over the Azure variable.
    connection_string = os.getenv("BIGSQL_CONNECTION_STRING") or os.getenv("AZURE_SQL_CONNECTION_STRING")

    # Discrete connection settings (used when no connection string is provided)
    server = os.getenv("AZURE_SQL_SERVER")
    database = os.getenv("AZURE_SQL_DATABASE")
    user = os.getenv("AZURE_SQL_USER")
    password = os.getenv("AZURE_SQL_PASSWORD")
    driver = os.getenv("BIGSQL_DRIVER") or os.getenv("AZURE_SQL_DRIVER", DEFAULT_DRIVER)
    authentication = os.getenv("AZURE_SQL_AUTHENTICATION")
    # parsed by the CLI (argparse type=int)
    login_timeout = os.getenv("BIGSQL_LOGIN_TIMEOUT", "30")

    # Run inputs
    script = os.getenv("BIGSQL_SCRIPT")
    log_file = os.getenv("BIGSQL_LOG_FILE")
    encoding = os.getenv("BIGSQL_ENCODING", "utf-8-sig")
    no_wait = (os.getenv("BIGSQL_NO_WAIT", "0") == "1")


def build_connection_string() -> Optional[str]:
    """Build a pyodbc-compatible connection string from environment variables."""
    if Settings.connection_string:
        return Settings.connection_string
    if not Settings.server or not Settings.database:
        return None
    parts = [
        "DRIVER={{{}}}".format(Settings.driver),
        f"SERVER=tcp:{Settings.server},1433",
        f"DATABASE={Settings.database}",
        "Encrypt=Yes",
        "TrustServerCertificate=No",
    ]
    if Settings.authentication:
        parts.append(f"Authentication={Settings.authentication}")
    if Settings.user and Settings.password:
        parts.append(f"UID={Settings.user}")
        parts.append(f"PWD={Settings.password}")
    return ";".join(parts)


# ADO.NET keyword -> ODBC keyword. Keys are compared lower-cased with spaces removed.
_ADO_TO_ODBC: Dict[str, str] = {
    "server": "SERVER",
    "datasource": "SERVER",
    "address": "SERVER",
    "addr": "SERVER",
    "database": "DATABASE",
    "initialcatalog": "DATABASE",
    "userid": "UID",
    "uid": "UID",
    "user": "UID",
    "password": "PWD",
    "pwd": "PWD",
    "integratedsecurity": "Trusted_Connection",
    "trustedconnection": "Trusted_Connection",
    "trustservercertificate": "TrustServerCertificate",
    "encrypt": "Encrypt",
}

_TRUTHY = {"true", "yes", "sspi"}
_FALSY = {"false", "no"}


def _split_pairs(raw: str) -> List[Tuple[str, str]]:
    # Values wrapped in {...} may contain ';'
    pairs: List[Tuple[str, str]] = []
    for m in re.finditer(r"\s*([^=;]+?)\s*=\s*(\{[^}]*\}|[^;]*)\s*(?:;|$)", raw):
        key, val = m.group(1), m.group(2).strip()
        if key:
            pairs.append((key, val))
    return pairs


def normalize_connection_string(raw: Optional[str], driver: str = DEFAULT_DRIVER) -> str:
    """Turn an ODBC or ADO.NET style connection string into one pyodbc accepts.

    ``Server=localhost;Database=Db;User Id=sa;Password=123;`` becomes
    ``DRIVER={ODBC Driver 18 for SQL Server};SERVER=localhost;DATABASE=Db;UID=sa;PWD=123;Encrypt=no``.
    ADO.NET strings without an Encrypt key get Encrypt=no, the SqlClient default;
    ODBC Driver 18 would otherwise encrypt and validate the server certificate.
    Unknown keywords are passed through untouched.
    """
    raw = (raw or "").strip()
    if not raw:
        raise ValueError("Connection string is empty")
    pairs = _split_pairs(raw)
    if not pairs:
        raise ValueError(f"Connection string has no KEY=VALUE parts: {raw}")

    parts: List[str] = []
    has_driver = False
    has_encrypt = False
    for key, val in pairs:
        norm = key.replace(" ", "").lower()
        if norm == "driver":
            has_driver = True
            parts.append(f"DRIVER={val}")
            continue
        odbc_key = _ADO_TO_ODBC.get(norm, key)
        if odbc_key == "Encrypt":
            has_encrypt = True
        if odbc_key in ("Trusted_Connection", "TrustServerCertificate", "Encrypt"):
            low = val.lower()
            if low in _TRUTHY:
                val = "yes"
            elif low in _FALSY:
                val = "no"
        parts.append(f"{odbc_key}={val}")
    if not has_driver:
        parts.insert(0, "DRIVER={{{}}}".format(driver))
        if not has_encrypt:
            parts.append("Encrypt=no")
    return ";".join(parts)
